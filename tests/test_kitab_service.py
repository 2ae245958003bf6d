"""
Kitab service tests: local search and paging, form rules and delete
failures that must leave the list untouched.
"""

import pytest

from core.models.entities import Kitab
from core.services.kitab_service import KitabService
from utils.constants import KITABS
from utils.exceptions import ConflictException

KITAB_ROWS = [
    {'id': f'k{i}', 'kitab_code': f'K{i:03d}', 'name_bn': f'কিতাব {i}',
     'name_ar': 'صحيح البخاري' if i == 3 else None, 'full_marks': 100}
    for i in range(1, 13)
]

FK_MESSAGE = ('update or delete on table "kitabs" violates foreign key constraint '
              '"marhala_kitabs_kitab_id_fkey" on table "marhala_kitabs"')


@pytest.fixture
def service(gateway, dispatcher):
    gateway.script('select:kitabs', KITAB_ROWS)
    return KitabService(gateway, dispatcher)


class TestKitabList:

    def test_pages_locally(self, service, gateway):
        controller = service.list_controller()
        controller.refresh()
        assert len(controller.items) == 10
        assert controller.total_items == 12
        controller.set_page(2)
        controller.refresh()
        assert [k.id for k in controller.items] == ['k11', 'k12']
        assert len(gateway.calls_to('select:kitabs')) == 1

    def test_search_by_code_and_arabic_name(self, service):
        controller = service.list_controller()
        controller.update(search_term='k012')
        controller.refresh()
        assert [k.id for k in controller.items] == ['k12']
        controller.update(search_term='البخاري')
        controller.refresh()
        assert [k.id for k in controller.items] == ['k3']

    def test_load_failure_is_reported(self, gateway, dispatcher, notifier):
        gateway.script('select:kitabs', ConflictException("boom", "XX000"))
        controller = KitabService(gateway, dispatcher).list_controller()
        controller.refresh()
        assert controller.items == []
        assert notifier.errors == ["boom"]


class TestKitabForm:

    def test_full_marks_must_be_whole_positive(self, service, gateway):
        form = service.form()
        form.on_change('name_bn', 'নাহু')
        form.on_change('full_marks', '12.5')
        assert not form.submit().ok
        assert form.error_for('full_marks') == "Full marks must be a whole number"
        assert gateway.calls_to('create_kitab_with_auto_code') == []

    def test_create(self, service, gateway):
        form = service.form()
        form.on_change('name_bn', ' নাহু ')
        form.on_change('full_marks', '100')
        assert form.submit().ok
        assert gateway.calls_to('create_kitab_with_auto_code')[0] == {
            'p_name_bn': 'নাহু', 'p_name_ar': None, 'p_full_marks': 100,
        }

    def test_edit_never_changes_code(self, service, gateway):
        kitab = Kitab(id='k1', kitab_code='K001', name_bn='পুরাতন', full_marks=50)
        form = service.form(kitab)
        form.on_change('kitab_code', 'K999')
        form.on_change('name_bn', 'নতুন')
        assert form.submit().ok
        params = gateway.calls_to('update_kitab')[0]
        assert params['p_id'] == 'k1'
        assert 'p_kitab_code' not in params
        assert 'kitab_code' not in form.draft

    def test_duplicate_name_routed_to_name(self, service, gateway):
        gateway.script('create_kitab_with_auto_code', ConflictException(
            'duplicate key value violates unique constraint "kitabs_name_bn_key"',
            ConflictException.UNIQUE_VIOLATION))
        form = service.form()
        form.on_change('name_bn', 'নাহু')
        form.on_change('full_marks', 100)
        form.submit()
        assert form.error_for('name_bn') == "A kitab with this name already exists"


class TestKitabDelete:

    def test_in_use_kitab_shows_backend_message(self, service, gateway, cache, notifier):
        controller = service.list_controller()
        controller.refresh()
        before = [k.id for k in controller.items]
        gateway.script('delete_kitab', ConflictException(FK_MESSAGE, ConflictException.FOREIGN_KEY_VIOLATION))

        result = service.delete_kitab(controller.items[0])

        assert not result.ok
        assert notifier.errors == [FK_MESSAGE]
        assert cache.contains(KITABS, controller.query)
        controller.refresh()
        assert [k.id for k in controller.items] == before
        assert len(gateway.calls_to('select:kitabs')) == 1

    def test_successful_delete_reloads(self, service, gateway, notifier):
        controller = service.list_controller()
        controller.refresh()
        result = service.delete_kitab(controller.items[0])
        assert result.ok
        assert gateway.calls_to('delete_kitab') == [{'p_id': 'k1'}]
        controller.refresh()
        assert len(gateway.calls_to('select:kitabs')) == 2
        assert notifier.successes == ["Kitab 'কিতাব 1' deleted"]
