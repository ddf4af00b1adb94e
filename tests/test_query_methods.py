import pytest

from sqlrepokit.query_methods import (
    QUERY_NAME_ATTR,
    QueryParts,
    build_where_clause,
    parse_method_name,
    parse_order_by,
    query,
    to_snake_case,
)


@pytest.mark.parametrize(("camel", "snake"), [("UserName", "user_name"), ("URLString", "url_string")])
def test_to_snake_case_documented_examples(camel, snake):
    assert to_snake_case(camel) == snake


def test_to_snake_case_keeps_lowercase():
    assert to_snake_case("email") == "email"
    assert to_snake_case("") == ""


def test_parse_order_by_directions():
    assert parse_order_by("IDDesc") == ("ID", "DESC")
    assert parse_order_by("NameAsc") == ("Name", "ASC")
    assert parse_order_by("Name") == ("Name", "ASC")


def test_parse_and_or_conditions():
    parts = parse_method_name("FindByUserNameAndEmailOrPartnerId")
    assert parts.where_clauses == ["(user_name = ? AND email = ?)", "(partner_id = ?)"]
    assert parts.order_by == ""
    assert parts.limit == 0


def test_parse_order_and_limit():
    parts = parse_method_name("FindByEmailOrderByIDDescLimit10")
    assert parts.order_by == "id DESC"
    assert parts.limit == 10
    assert len(parts.where_clauses) == 1


def test_parse_default_ascending():
    parts = parse_method_name("FindByEmailOrderByName")
    assert parts.order_by.endswith(" ASC")
    assert parts.order_by.startswith(to_snake_case("Name"))


@pytest.mark.parametrize(
    "name",
    ["FindByA", "FindByAAndB", "FindByAOrB", "FindByAAndBOrCAndDOrE"],
)
def test_clause_count_matches_or_groups(name):
    parts = parse_method_name(name)
    body = name[len("FindBy"):]
    assert len(parts.where_clauses) == body.count("Or") + 1
    assert all(c.startswith("(") and c.endswith(")") for c in parts.where_clauses)
    assert build_where_clause(parts).count("?") == body.count("And") + body.count("Or") + 1


def test_rejects_wrong_prefix():
    with pytest.raises(ValueError, match="must start with FindBy"):
        parse_method_name("GetByEmail")


def test_rejects_bad_limit():
    with pytest.raises(ValueError, match="invalid limit number"):
        parse_method_name("FindByEmailOrderByIDLimitTen")


def test_build_where_clause_joins_with_or():
    assert build_where_clause(QueryParts(["(a = ?)", "(b = ?)"])) == "(a = ?) OR (b = ?)"


def test_query_decorator_records_name():
    def find_by_user_name(self, username):
        return username

    decorated = query(find_by_user_name)

    assert getattr(decorated, QUERY_NAME_ATTR) == "FindByUserName"
    assert decorated(None, "x") == "x"
    parts = parse_method_name(getattr(decorated, QUERY_NAME_ATTR))
    assert parts.where_clauses == ["(user_name = ?)"]


def test_query_decorator_name_parses_like_camel_case():
    @query
    def find_all_by_email_order_by_id_desc_limit10(self, email):
        return email

    recorded = getattr(find_all_by_email_order_by_id_desc_limit10, QUERY_NAME_ATTR)
    assert recorded.startswith("FindAllBy")
    derived = parse_method_name("FindBy" + recorded[len("FindAllBy"):])
    expected = parse_method_name("FindByEmailOrderByIDDescLimit10")
    assert derived == expected