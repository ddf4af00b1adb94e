import uuid
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import NoResultFound

from sqlrepokit.config import Config
from sqlrepokit.datasource import open_datasource
from sqlrepokit.example import UserModel, UserRepository, main


@pytest.fixture
def users(tmp_path):
    ds = open_datasource(Config(), url=f"sqlite:///{tmp_path / 'users.db'}", debug=False)
    UserModel.metadata.create_all(ds.engine)
    yield UserRepository(ds)
    ds.close()


def test_before_create_assigns_id_and_time():
    user = UserModel(user_name="alice")
    before = datetime.now()
    user.before_create()
    assert isinstance(user.id, uuid.UUID)
    assert before <= user.created_at <= datetime.now()


def test_before_update_sets_time():
    user = UserModel(user_name="alice")
    before = datetime.now()
    user.before_update()
    assert before <= user.updated_at <= datetime.now()


def test_insert_and_find_by_user_name(users):
    user = UserModel(user_name="alice", email="alice@example.com", partner_id="p-1")
    users.insert(user)
    found = users.find_by_user_name("alice")
    assert found.id == user.id
    assert found.email == "alice@example.com"


def test_find_by_user_name_missing(users):
    with pytest.raises(NoResultFound):
        users.find_by_user_name("nobody")


def test_find_by_user_name_and_email_or_partner_id(users):
    users.insert(UserModel(user_name="alice", email="alice@example.com", partner_id="p-1"))
    users.insert(UserModel(user_name="bob", email="bob@example.com", partner_id="p-2"))
    by_partner = users.find_by_user_name_and_email_or_partner_id("x", "x@example.com", "p-2")
    assert by_partner.user_name == "bob"
    by_name = users.find_by_user_name_and_email_or_partner_id(
        "alice", "alice@example.com", "none"
    )
    assert by_name.user_name == "alice"


def test_find_all_by_email_ordered_and_limited(users):
    inserted = []
    for n in range(12):
        user = UserModel(user_name=f"user{n}", email="shared@example.com")
        users.insert(user)
        inserted.append(user.id)
    users.insert(UserModel(user_name="other", email="other@example.com"))
    found = [user.id for user in users.find_all_by_email_order_by_id_desc_limit10("shared@example.com")]
    assert len(found) == 10
    assert found == sorted(inserted, key=lambda value: value.hex, reverse=True)[:10]


def test_main_runs_against_database(tmp_path, capsys):
    url = f"sqlite:///{tmp_path / 'main.db'}"
    engine = create_engine(url)
    UserModel.metadata.create_all(engine)
    engine.dispose()
    assert main(["--url", url, "--no-debug"]) == 0
    out = capsys.readouterr().out
    assert "Repository methods injected successfully." in out
    assert "find_by_id: error: record not found" in out
    assert "exists: False" in out
    assert "count_by: 0" in out


def test_main_reports_connection_failure(tmp_path, capsys):
    url = f"sqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}"
    assert main(["--url", url, "--no-debug"]) == 1
    assert "failed to open database" in capsys.readouterr().err