import pytest


class FakeError(Exception):
    pass


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection
        self.description = None
        self.rowcount = -1
        self._rows = []
        self.closed = False

    def execute(self, sql, params=None, **kwargs):
        connection = self.connection
        connection.executed.append((sql, params, kwargs))
        for fragment in connection.fail_on:
            if fragment in sql:
                raise connection.driver.Error(*(connection.error_args or (1064, f"You have an error near '{fragment}'")))
        for fragment, columns, rows, rowcount in connection.responses:
            if fragment in sql:
                self.description = [(column, None, None, None, None, None, None) for column in columns] or None
                self._rows = list(rows)
                self.rowcount = rowcount if rowcount is not None else len(self._rows)
                return
        self.description = None
        self._rows = []
        self.rowcount = 0

    def _fail(self, hook, code, message):
        if hook in self.connection.fail_on:
            raise self.connection.driver.Error(code, message)

    def fetchone(self):
        self._fail("fetch()", 2013, "Lost connection to MySQL server during query")
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        self._fail("fetch()", 2013, "Lost connection to MySQL server during query")
        rows, self._rows = self._rows, []
        return rows

    def close(self):
        self._fail("close()", 2014, "Commands out of sync")
        self.closed = True


class FakeConnection:
    def __init__(self, driver, args, kwargs):
        self.driver = driver
        self.args = args
        self.kwargs = kwargs
        self.executed = []
        self.responses = []
        self.fail_on = set()
        self.error_args = None
        self.autocommit = kwargs.get("autocommit", True)
        self.autocommit_history = []
        self.commits = 0
        self.rollbacks = 0
        self.begins = 0
        self.closed = False
        self.cursors = []
        self.last_id = 0

    def respond(self, fragment, columns=(), rows=(), rowcount=None):
        self.responses.append((fragment, tuple(columns), list(rows), rowcount))

    @property
    def statements(self):
        return [sql for sql, _, _ in self.executed]

    def cursor(self):
        if "cursor()" in self.fail_on:
            raise self.driver.Error(2006, "MySQL server has gone away")
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        return cursor

    def execute(self, sql, params=None):
        cursor = self.cursor()
        cursor.execute(sql, params)
        return cursor

    def commit(self):
        if "commit" in self.fail_on:
            raise self.driver.Error(2006, "server has gone away")
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def begin(self):
        self.begins += 1

    def close(self):
        self.closed = True

    def insert_id(self):
        return self.last_id

    def escape(self, value):
        return "'" + str(value).replace("'", "\\'") + "'"

    def select_db(self, name):
        if "select_db" in self.fail_on:
            raise self.driver.Error(1049, f"Unknown database '{name}'")
        self.database = name


class FakeMySQLdbConnection(FakeConnection):
    """mysqlclient exposes autocommit as a method and literal() returning bytes."""

    def __init__(self, driver, args, kwargs):
        super().__init__(driver, args, kwargs)
        self.__dict__["autocommit"] = self._set_autocommit

    def _set_autocommit(self, value):
        self.autocommit_history.append(value)

    def literal(self, value):
        return ("'" + str(value).replace("'", "\\'") + "'").encode()


class FakeDriver:
    Error = FakeError

    def __init__(self, connection_class=FakeConnection, fail_connect=False):
        self.connection_class = connection_class
        self.fail_connect = fail_connect
        self.connections = []

    def connect(self, *args, **kwargs):
        if self.fail_connect:
            raise self.Error(2003, "Can't connect to server")
        connection = self.connection_class(self, args, kwargs)
        self.connections.append(connection)
        return connection

    @property
    def connection(self):
        return self.connections[-1]


@pytest.fixture
def fake_driver():
    return FakeDriver()


@pytest.fixture
def mysqldb_driver():
    return FakeDriver(FakeMySQLdbConnection)


@pytest.fixture
def failing_driver():
    return FakeDriver(fail_connect=True)
