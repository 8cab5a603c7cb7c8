import pytest

from tatouage import db
from tatouage.errors import AmbiguousAccount, DuplicateAccount, NotFound
from tatouage.models import ImageRecord, UserRecord
from tatouage.store import RecordStore


@pytest.fixture
def store(app):
    return RecordStore(db.session)


def _image(token='ID_Patient:1', name='scan.png'):
    return ImageRecord(original_name=name, watermarked_name=f'/uploads/tatouee_{name}',
                       token=token, image_data=b'\x89PNG fake')


def test_create_assigns_id_and_lists(store):
    image_id = store.create_image(_image())
    assert image_id
    records = store.list_images()
    assert [r.id for r in records] == [image_id]
    assert records[0].token == 'ID_Patient:1'
    assert records[0].image_data == b'\x89PNG fake'
    assert records[0].created_at is not None


def test_create_keeps_supplied_id(store):
    record = _image()
    record.id = 'fixed-id'
    assert store.create_image(record) == 'fixed-id'


def test_list_in_insertion_order(store):
    ids = [store.create_image(_image(token=f't{i}')) for i in range(3)]
    assert [r.id for r in store.list_images()] == ids


def test_delete_removes_record(store):
    keep = store.create_image(_image(name='a.png'))
    gone = store.create_image(_image(name='b.png'))
    store.delete_image(gone)
    assert [r.id for r in store.list_images()] == [keep]


def test_delete_unknown_id(store):
    with pytest.raises(NotFound):
        store.delete_image('does-not-exist')


def test_get_image(store):
    image_id = store.create_image(_image())
    assert store.get_image(image_id).original_name == 'scan.png'
    with pytest.raises(NotFound):
        store.get_image('nope')


def test_users_by_email(store):
    user_id = store.create_user(UserRecord(username='alice', email='alice@example.org', password_hash='x'))
    found = store.find_user_by_email('alice@example.org')
    assert found.id == user_id
    assert found.created_at is not None and found.updated_at is not None
    assert store.find_user_by_email('bob@example.org') is None


def test_duplicate_email_rejected(store):
    store.create_user(UserRecord(username='alice', email='alice@example.org', password_hash='x'))
    with pytest.raises(DuplicateAccount):
        store.create_user(UserRecord(username='alice2', email='alice@example.org', password_hash='y'))
    # the session is usable again after the rollback
    assert store.find_user_by_email('alice@example.org').username == 'alice'


def test_two_accounts_for_one_email_is_ambiguous(app):
    class FakeResult:
        def scalars(self):
            return self

        def all(self):
            return [UserRecord(username='a'), UserRecord(username='b')]

    class FakeSession:
        def execute(self, stmt):
            return FakeResult()

    with pytest.raises(AmbiguousAccount):
        RecordStore(FakeSession()).find_user_by_email('dup@example.org')
