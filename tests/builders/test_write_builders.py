import pytest

from sqlbridge.builders import BuilderFactory, ParameterContainer
from sqlbridge.exceptions import IntegrityError, InvalidStateError
from sqlbridge.platforms import DialectCapabilities, MySqlPlatform, ParameterType, PostgresPlatform


@pytest.fixture
def pg():
    return BuilderFactory(PostgresPlatform(DialectCapabilities(name="pgsql", parameter_type=ParameterType.INDEX)))


@pytest.fixture
def mysql_named():
    return BuilderFactory(MySqlPlatform(DialectCapabilities(name="mysql-pdo", parameter_type=ParameterType.NAMED)))


def test_insert_with_index_parameters(pg):
    insert = pg.insert("users").values({"name": "bob", "age": 30})
    container = ParameterContainer()
    assert insert.compile_with_parameters(container) == 'INSERT INTO "users" ("name", "age") VALUES ($1, $2)'
    assert container.as_dict() == {"insert1": "bob", "insert2": 30}


def test_insert_literal_and_null(mysql_named):
    insert = mysql_named.insert().into("users").value("name", "bob").value("deleted_at", None)
    assert insert.compile() == "INSERT INTO `users` (`name`, `deleted_at`) VALUES ('bob', NULL)"


def test_insert_requires_table_and_columns(pg):
    with pytest.raises(InvalidStateError):
        pg.insert().values({"a": 1}).compile()
    with pytest.raises(InvalidStateError):
        pg.insert("users").compile()


def test_insert_from_select(pg):
    select = pg.select(["name", "age"]).from_("staging").where("ok", True)
    insert = pg.insert("users").from_select(["name", "age"], select)
    container = ParameterContainer()
    assert insert.compile_with_parameters(container) == (
        'INSERT INTO "users" ("name", "age") SELECT "name", "age" FROM "staging" WHERE "ok" = $1'
    )
    assert container.values() == [True]
    with pytest.raises(IntegrityError):
        pg.insert("users").from_select(["name"], select)


def test_update_numbers_sets_before_wheres(pg):
    update = pg.update("users").sets({"name": "alice", "age": 31}).where("id", 7)
    container = ParameterContainer()
    assert update.compile_with_parameters(container) == (
        'UPDATE "users" SET "name" = $1, "age" = $2 WHERE "id" = $3'
    )
    assert container.names() == ["update1", "update2", "where3"]


def test_update_with_expression(mysql_named):
    update = mysql_named.update("users").set("hits", mysql_named.literal("`hits` + 1")).where("id", 1)
    assert update.compile() == "UPDATE `users` SET `hits` = `hits` + 1 WHERE `id` = 1"


def test_update_requires_sets(pg):
    with pytest.raises(InvalidStateError):
        pg.update("users").where("id", 1).compile()


def test_delete(mysql_named):
    delete = mysql_named.delete("users").where("id", [1, 2])
    container = ParameterContainer()
    assert delete.compile_with_parameters(container) == "DELETE FROM `users` WHERE `id` IN (:where1, :where2)"
    assert mysql_named.delete().from_("users").compile() == "DELETE FROM `users`"
    with pytest.raises(InvalidStateError):
        mysql_named.delete().compile()
