"""
Tests for the canvas style state machine and its per-post service.
"""
from concurrent.futures import ThreadPoolExecutor

import pytest

from models import CanvasStyle, PostType, UserPreferences
from services.canvas_style import CanvasStyleMachine, CanvasStyleService, StyleState, coerce_field
from services.style_store import PersistenceFailure
from services.templates.registry import UnknownTemplate
from utils.colors import InvalidHex


class DeferredDispatcher:
    """Holds save jobs so tests decide when (and in which order) they run."""

    def __init__(self):
        self.jobs = []

    def __call__(self, fn):
        self.jobs.append(fn)


def _machine(store, dispatcher=None, post_type=PostType.JUST_LISTED, **kwargs):
    machine = CanvasStyleMachine(store, "post-1", dispatcher=dispatcher)
    machine.initialize(post_type, **kwargs)
    return machine


def test_uninitialized_machine_rejects_use(memory_store):
    machine = CanvasStyleMachine(memory_store, "post-1")
    assert machine.state == StyleState.UNINITIALIZED
    with pytest.raises(RuntimeError):
        machine.snapshot()
    with pytest.raises(RuntimeError):
        machine.mutate("primary_color", "#112233")


def test_initialize_defaults(memory_store):
    machine = _machine(memory_store)
    assert machine.state == StyleState.DEFAULT
    assert machine.snapshot() == CanvasStyle(template_id="classic")


def test_initialize_applies_brand_then_persisted(memory_store):
    prefs = UserPreferences(global_primary_color="#111111", global_secondary_color="#222222")
    machine = _machine(memory_store, persisted={"secondaryColor": "#333333", "templateId": "bold"}, prefs=prefs)
    style = machine.snapshot()
    assert style.primary_color == "#111111"
    assert style.secondary_color == "#333333"
    assert style.template_id == "bold"


def test_initialize_falls_back_on_unknown_persisted_template(memory_store):
    machine = _machine(memory_store, persisted={"template": "retro", "font": "inter"})
    style = machine.snapshot()
    assert style.template_id == "classic"
    assert style.selected_font_id == "inter"


def test_successful_mutation_confirms_and_persists(memory_store):
    machine = _machine(memory_store)
    mutation = machine.mutate("primary_color", "#ABCDEF")
    assert machine.state == StyleState.CONFIRMED
    assert machine.status(mutation.seq) == StyleState.CONFIRMED
    assert machine.snapshot().primary_color == "#abcdef"
    assert memory_store.load("post-1")["primaryColor"] == "#abcdef"


def test_failed_mutation_leaves_confirmed_style_unchanged(failing_store):
    """A rejected save must not leak into the confirmed style."""
    machine = _machine(failing_store)
    before = machine.snapshot()
    before_doc = before.to_dict()

    mutation = machine.mutate("primary_color", "#ff0000")

    assert machine.state == StyleState.REJECTED
    assert machine.status(mutation.seq) == StyleState.REJECTED
    assert isinstance(machine.error(mutation.seq), PersistenceFailure)
    assert machine.snapshot() is before
    assert machine.snapshot().to_dict() == before_doc
    assert failing_store.load("post-1") is None


def test_recovers_after_failure(failing_store):
    machine = _machine(failing_store)
    machine.mutate("show_price", True)
    assert machine.state == StyleState.REJECTED

    failing_store.failing = False
    machine.mutate("show_price", True)
    assert machine.state == StyleState.CONFIRMED
    assert machine.snapshot().show_price is True


def test_unexpected_store_error_becomes_persistence_failure(memory_store, monkeypatch):
    def boom(post_id, doc):
        raise OSError("read-only filesystem")

    monkeypatch.setattr(memory_store, "save", boom)
    machine = _machine(memory_store)
    mutation = machine.mutate("currency", "eur")
    assert machine.state == StyleState.REJECTED
    assert isinstance(machine.error(mutation.seq), PersistenceFailure)
    assert machine.snapshot().currency == "USD"


def test_pending_until_save_completes(memory_store):
    dispatcher = DeferredDispatcher()
    machine = _machine(memory_store, dispatcher=dispatcher)

    mutation = machine.mutate("template_id", "modern")
    assert machine.state == StyleState.PENDING
    assert machine.status(mutation.seq) == StyleState.PENDING
    assert machine.snapshot().template_id == "classic"

    dispatcher.jobs.pop()()
    assert machine.state == StyleState.CONFIRMED
    assert machine.snapshot().template_id == "modern"


def test_results_apply_in_submission_order(memory_store):
    """A late first save never overwrites a later confirmed value."""
    dispatcher = DeferredDispatcher()
    machine = _machine(memory_store, dispatcher=dispatcher)

    first = machine.mutate("primary_color", "#111111")
    second = machine.mutate("primary_color", "#222222")

    # second save lands first: buffered until the first resolves
    machine.on_persist_success(second.seq)
    assert machine.state == StyleState.PENDING
    assert machine.snapshot().primary_color == "#000000"

    machine.on_persist_success(first.seq)
    assert machine.state == StyleState.CONFIRMED
    assert machine.snapshot().primary_color == "#222222"


def test_out_of_order_failure_then_success(memory_store):
    dispatcher = DeferredDispatcher()
    machine = _machine(memory_store, dispatcher=dispatcher)

    first = machine.mutate("secondary_color", "#111111")
    second = machine.mutate("text_color", "#222222")

    machine.on_persist_failure(first.seq, PersistenceFailure("timeout"))
    assert machine.state == StyleState.PENDING

    machine.on_persist_success(second.seq)
    style = machine.snapshot()
    assert style.secondary_color is None
    assert style.text_color == "#222222"
    assert machine.status(first.seq) == StyleState.REJECTED
    assert machine.status(second.seq) == StyleState.CONFIRMED


def test_duplicate_and_unknown_callbacks_are_ignored(memory_store):
    dispatcher = DeferredDispatcher()
    machine = _machine(memory_store, dispatcher=dispatcher)
    mutation = machine.mutate("show_signature", False)

    machine.on_persist_success(mutation.seq)
    machine.on_persist_failure(mutation.seq, PersistenceFailure("late"))
    machine.on_persist_success(99)

    assert machine.status(mutation.seq) == StyleState.CONFIRMED
    assert machine.snapshot().show_signature is False
    with pytest.raises(KeyError):
        machine.status(99)


def test_reinitialize_discards_in_flight_results(memory_store):
    dispatcher = DeferredDispatcher()
    machine = _machine(memory_store, dispatcher=dispatcher)
    machine.mutate("primary_color", "#111111")
    stale_job = dispatcher.jobs.pop()

    machine.initialize(PostType.JUST_SOLD)
    generation = machine.generation
    stale_job()

    assert machine.generation == generation
    assert machine.state == StyleState.DEFAULT
    assert machine.snapshot().primary_color == "#000000"
    # the save dispatched before the reset never reaches the store
    assert memory_store.load("post-1") is None


def test_concurrent_saves_of_different_fields_keep_both(memory_store):
    dispatcher = DeferredDispatcher()
    machine = _machine(memory_store, dispatcher=dispatcher)

    machine.mutate("primary_color", "#111111")
    second = machine.mutate("secondary_color", "#222222")
    assert second.candidate.primary_color == "#111111"

    for job in list(dispatcher.jobs):
        job()

    stored = memory_store.load("post-1")
    assert stored["primaryColor"] == "#111111"
    assert stored["secondaryColor"] == "#222222"
    style = machine.snapshot()
    assert (style.primary_color, style.secondary_color) == ("#111111", "#222222")


def test_late_callback_from_previous_generation_does_not_touch_new_mutation(memory_store):
    dispatcher = DeferredDispatcher()
    machine = _machine(memory_store, dispatcher=dispatcher)
    old = machine.mutate("primary_color", "#111111")

    machine.initialize(PostType.JUST_SOLD)
    new = machine.mutate("primary_color", "#222222")
    assert new.seq != old.seq

    # callback without a generation tag, addressed to the discarded mutation
    machine.on_persist_failure(old.seq, PersistenceFailure("late"))

    assert machine.status(new.seq) == StyleState.PENDING
    assert machine.state == StyleState.PENDING
    assert machine.last_error is None


@pytest.mark.parametrize("field,value,error", [
    ("template_id", "retro", UnknownTemplate),
    ("primary_color", "blue", InvalidHex),
    ("show_price", "yes", ValueError),
    ("selected_font_id", "comic", ValueError),
    ("nonexistent", 1, ValueError),
    ("custom_heading", 42, ValueError),
])
def test_invalid_mutations_leave_state_unchanged(memory_store, field, value, error):
    machine = _machine(memory_store)
    before = machine.snapshot()
    with pytest.raises(error):
        machine.mutate(field, value)
    assert machine.state == StyleState.DEFAULT
    assert machine.snapshot() is before
    assert memory_store.load("post-1") is None


def test_coerce_field_normalizes():
    assert coerce_field("primary_color", "#ABCDEF", PostType.JUST_LISTED) == "#abcdef"
    assert coerce_field("secondary_color", None, PostType.JUST_LISTED) is None
    assert coerce_field("currency", "cad", PostType.JUST_LISTED) == "CAD"
    assert coerce_field("custom_heading", "", PostType.JUST_LISTED) is None
    with pytest.raises(InvalidHex):
        coerce_field("primary_color", None, PostType.JUST_LISTED)


def test_thread_pool_dispatcher(memory_store):
    with ThreadPoolExecutor(max_workers=4) as pool:
        machine = _machine(memory_store, dispatcher=pool.submit)
        for i in range(20):
            machine.mutate("price_text", str(i))
    assert machine.state == StyleState.CONFIRMED
    assert machine.snapshot().price_text == "19"


def test_service_update_and_get(memory_store):
    service = CanvasStyleService(store=memory_store)
    style = service.update("42", "JUST_LISTED", "template_id", "elegant")
    assert style.template_id == "elegant"
    assert service.get_style("42", PostType.JUST_LISTED).template_id == "elegant"

    # a fresh service reads the persisted document
    other = CanvasStyleService(store=memory_store)
    assert other.get_style("42", "JUST_LISTED").template_id == "elegant"


def test_service_update_raises_on_rejected_save(failing_store):
    service = CanvasStyleService(store=failing_store)
    with pytest.raises(PersistenceFailure):
        service.update("42", "JUST_LISTED", "primary_color", "#ff0000")
    assert service.get_style("42", "JUST_LISTED").primary_color == "#000000"


def test_service_reinitializes_on_post_type_change(memory_store):
    service = CanvasStyleService(store=memory_store)
    machine = service.machine("42", "JUST_LISTED")
    generation = machine.generation
    assert service.machine("42", "JUST_LISTED").generation == generation
    assert service.machine("42", "OPEN_HOUSE").generation == generation + 1


def test_service_forget(memory_store):
    service = CanvasStyleService(store=memory_store)
    first = service.machine("42", "JUST_LISTED")
    service.forget("42")
    assert service.machine("42", "JUST_LISTED") is not first
