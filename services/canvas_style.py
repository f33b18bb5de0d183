"""
Canvas style state machine.

UNINITIALIZED -> DEFAULT -> PENDING -> CONFIRMED, with REJECTED after a
failed save. The confirmed style only changes once the store has durably
saved a mutation; persistence results are applied strictly in submission
order so a slow early save can never overwrite a later confirmed value.
"""
import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Optional

from models import CanvasStyle, PostType, UserPreferences, COLOR_FIELDS, BOOL_FIELDS, OPTIONAL_TEXT_FIELDS
from services.style_store import StyleStore, PersistenceFailure, get_style_store
from services.templates.fonts import FONT_TABLE
from services.templates.registry import UnknownTemplate, is_known, default_template_id
from utils.colors import normalize_hex

logger = logging.getLogger(__name__)


class StyleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    DEFAULT = "default"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class PendingMutation:
    seq: int
    generation: int
    field: str
    value: Any
    candidate: CanvasStyle


def inline_dispatcher(fn: Callable[[], None]) -> None:
    fn()


def coerce_field(field: str, value, post_type: PostType):
    """
    Validate one mutation value.

    Raises:
        ValueError: unknown field or wrong value type
        InvalidHex: malformed color
        UnknownTemplate: template id not offered for the post type
    """
    if field not in CanvasStyle.field_names():
        raise ValueError(f"Unknown canvas field '{field}'")

    if field == "template_id":
        if not is_known(value, post_type):
            raise UnknownTemplate(value, post_type)
        return value

    if field in COLOR_FIELDS:
        if value is None and field != "primary_color":
            return None
        return normalize_hex(value)

    if field in BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ValueError(f"'{field}' must be a boolean")
        return value

    if field == "selected_font_id":
        if value not in FONT_TABLE:
            raise ValueError(f"Unknown font '{value}'")
        return value

    if field in OPTIONAL_TEXT_FIELDS:
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise ValueError(f"'{field}' must be a string")
        return value

    if not isinstance(value, str):
        raise ValueError(f"'{field}' must be a string")
    return value.upper() if field == "currency" else value


class CanvasStyleMachine:
    """
    Per-post canvas style holder.

    `dispatcher` runs the save: inline by default, or anything accepting a
    zero-argument callable (e.g. ThreadPoolExecutor.submit). Completion
    callbacks may arrive on other threads.
    """

    def __init__(self, store: StyleStore, post_id: str, dispatcher: Optional[Callable] = None):
        self.store = store
        self.post_id = str(post_id)
        self._dispatch = dispatcher or inline_dispatcher
        self._lock = threading.Lock()

        self._state = StyleState.UNINITIALIZED
        self._post_type: Optional[PostType] = None
        self._confirmed: Optional[CanvasStyle] = None
        self._generation = 0

        self._next_seq = 0
        self._next_apply = 0
        self._in_flight: Dict[int, PendingMutation] = {}
        self._results: Dict[int, Optional[Exception]] = {}
        self._outcomes: Dict[int, Optional[Exception]] = {}
        self.last_error: Optional[Exception] = None

    @property
    def state(self) -> StyleState:
        return self._state

    @property
    def post_type(self) -> Optional[PostType]:
        return self._post_type

    @property
    def generation(self) -> int:
        return self._generation

    def initialize(self, post_type, persisted: Optional[dict] = None,
                   prefs: Optional[UserPreferences] = None) -> CanvasStyle:
        """
        Reset to the defaults for a post type, then overlay brand colors and
        the persisted document. Earlier in-flight saves become no-ops.
        """
        post_type = PostType.parse(post_type)
        style = CanvasStyle(template_id=default_template_id(post_type))

        if prefs is not None:
            brand = {}
            if prefs.global_primary_color:
                brand["primary_color"] = prefs.global_primary_color
            if prefs.global_secondary_color:
                brand["secondary_color"] = prefs.global_secondary_color
            if prefs.global_text_color:
                brand["text_color"] = prefs.global_text_color
            style = replace(style, **brand)

        style = CanvasStyle.from_dict(persisted, base=style)

        if not is_known(style.template_id, post_type):
            fallback = default_template_id(post_type)
            logger.warning(
                f"Post {self.post_id}: persisted template '{style.template_id}' unknown for "
                f"{post_type.value}, using '{fallback}'"
            )
            style = replace(style, template_id=fallback)

        with self._lock:
            self._generation += 1
            self._post_type = post_type
            self._confirmed = style
            # seq keeps counting across generations so a late callback can
            # never match a mutation submitted after this reset
            self._next_apply = self._next_seq
            self._in_flight.clear()
            self._results.clear()
            self._outcomes.clear()
            self.last_error = None
            self._state = StyleState.DEFAULT

        return style

    def snapshot(self) -> CanvasStyle:
        """Confirmed style for a render pass (immutable, safe to hand out)."""
        if self._confirmed is None:
            raise RuntimeError("Canvas style not initialized")
        return self._confirmed

    def mutate(self, field: str, value) -> PendingMutation:
        """
        Submit a one-field change. The confirmed style is untouched until the
        save succeeds.

        The saved document is the confirmed style plus every change still in
        flight, in submission order, so concurrent saves of different fields
        never drop each other from the store.
        """
        if self._state == StyleState.UNINITIALIZED:
            raise RuntimeError("Canvas style not initialized")

        value = coerce_field(field, value, self._post_type)

        with self._lock:
            candidate = self._confirmed
            for seq in sorted(self._in_flight):
                earlier = self._in_flight[seq]
                candidate = candidate.with_field(earlier.field, earlier.value)
            mutation = PendingMutation(
                seq=self._next_seq,
                generation=self._generation,
                field=field,
                value=value,
                candidate=candidate.with_field(field, value),
            )
            self._next_seq += 1
            self._in_flight[mutation.seq] = mutation
            self._state = StyleState.PENDING

        doc = mutation.candidate.to_dict()
        self._dispatch(lambda: self._persist(mutation, doc))
        return mutation

    def _persist(self, mutation: PendingMutation, doc: dict) -> None:
        with self._lock:
            stale = mutation.generation != self._generation
        if stale:
            logger.info(f"Post {self.post_id}: skipping save {mutation.seq} from generation {mutation.generation}")
            return
        try:
            self.store.save(self.post_id, doc)
        except PersistenceFailure as e:
            self.on_persist_failure(mutation.seq, e, generation=mutation.generation)
            return
        except Exception as e:
            logger.exception(f"Post {self.post_id}: unexpected error saving canvas style")
            self.on_persist_failure(
                mutation.seq, PersistenceFailure(str(e), post_id=self.post_id), generation=mutation.generation
            )
            return
        self.on_persist_success(mutation.seq, generation=mutation.generation)

    def on_persist_success(self, seq: int, generation: Optional[int] = None) -> None:
        self._record(seq, None, generation)

    def on_persist_failure(self, seq: int, error: Exception, generation: Optional[int] = None) -> None:
        self._record(seq, error, generation)

    def _record(self, seq: int, error: Optional[Exception], generation: Optional[int]) -> None:
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.info(f"Post {self.post_id}: ignoring save result {seq} from generation {generation}")
                return
            if seq not in self._in_flight or seq in self._results:
                return
            self._results[seq] = error
            self._drain()

    def _drain(self) -> None:
        # Caller holds the lock
        while self._next_apply in self._results:
            seq = self._next_apply
            error = self._results.pop(seq)
            mutation = self._in_flight.pop(seq)
            self._outcomes[seq] = error
            self._next_apply += 1

            if error is None:
                # Only this field: other in-flight fields keep their confirmed values
                self._confirmed = self._confirmed.with_field(mutation.field, mutation.value)
                self._state = StyleState.CONFIRMED
            else:
                logger.warning(f"Post {self.post_id}: canvas style save rejected ({mutation.field}): {error}")
                self.last_error = error
                self._state = StyleState.REJECTED

        if self._in_flight:
            self._state = StyleState.PENDING

    def status(self, seq: int) -> StyleState:
        """Outcome of one submitted mutation in the current generation."""
        with self._lock:
            if seq in self._outcomes:
                return StyleState.REJECTED if self._outcomes[seq] is not None else StyleState.CONFIRMED
            if seq in self._in_flight:
                return StyleState.PENDING
        raise KeyError(seq)

    def error(self, seq: int) -> Optional[Exception]:
        with self._lock:
            return self._outcomes.get(seq)


class CanvasStyleService:
    """
    Keeps one CanvasStyleMachine per post for the HTTP layer.
    """

    def __init__(self, store: Optional[StyleStore] = None, dispatcher: Optional[Callable] = None):
        self.store = store or get_style_store()
        self.dispatcher = dispatcher
        self._machines: Dict[str, CanvasStyleMachine] = {}
        self._lock = threading.Lock()

    def machine(self, post_id, post_type, prefs: Optional[UserPreferences] = None) -> CanvasStyleMachine:
        """
        Machine for a post, (re)initialized from the store when new or when
        the post type changed.

        Raises:
            PersistenceFailure: the stored document could not be read
        """
        post_type = PostType.parse(post_type)
        key = str(post_id)
        with self._lock:
            machine = self._machines.get(key)
            if machine is None:
                machine = CanvasStyleMachine(self.store, key, dispatcher=self.dispatcher)
                self._machines[key] = machine

        if machine.post_type != post_type:
            machine.initialize(post_type, persisted=self.store.load(key), prefs=prefs)
        return machine

    def get_style(self, post_id, post_type, prefs: Optional[UserPreferences] = None) -> CanvasStyle:
        return self.machine(post_id, post_type, prefs).snapshot()

    def update(self, post_id, post_type, field: str, value, prefs: Optional[UserPreferences] = None) -> CanvasStyle:
        """
        Apply one field change and return the confirmed style.

        Raises:
            PersistenceFailure: the save was rejected (confirmed style unchanged)
            UnknownTemplate / InvalidHex / ValueError: invalid change
        """
        machine = self.machine(post_id, post_type, prefs)
        mutation = machine.mutate(field, value)
        if machine.status(mutation.seq) == StyleState.REJECTED:
            raise machine.error(mutation.seq)
        return machine.snapshot()

    def forget(self, post_id) -> None:
        with self._lock:
            self._machines.pop(str(post_id), None)
