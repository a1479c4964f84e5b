from __future__ import annotations

from typing import Callable, Iterable, Mapping

from django.db import transaction

from .exceptions import InvalidTransition, NotFound


class TransitionTable:
    """Allowed status moves for a model, in one place.

    A state with no outgoing moves is terminal.
    """

    def __init__(self, transitions: Mapping[str, Iterable[str]]):
        self._transitions = {state: tuple(targets) for state, targets in transitions.items()}

    @property
    def states(self) -> tuple[str, ...]:
        return tuple(self._transitions)

    def allowed(self, current: str) -> tuple[str, ...]:
        return self._transitions.get(current, ())

    def can(self, current: str, target: str) -> bool:
        return target in self.allowed(current)

    def is_terminal(self, state: str) -> bool:
        return not self.allowed(state)

    @property
    def terminal_states(self) -> tuple[str, ...]:
        return tuple(s for s in self._transitions if self.is_terminal(s))

    def check(self, current: str, target: str) -> None:
        if not self.can(current, target):
            raise InvalidTransition(current, target)


def lock_status(instance) -> str:
    """Lock ``instance``'s row and load its stored status onto it.

    Must run inside a transaction.
    """
    model = type(instance)
    if instance.pk is None:
        return instance.status
    try:
        instance.status = (
            model.objects.select_for_update()
            .values_list("status", flat=True)
            .get(pk=instance.pk)
        )
    except model.DoesNotExist:
        raise NotFound(f"{model.__name__} {instance.pk} does not exist.")
    return instance.status


def apply_transition(instance, table: TransitionTable, target: str, after_save: Callable | None = None, **changes) -> str:
    """Move ``instance`` to ``target`` and save it with ``changes``.

    Either the row and the instance both end in ``target`` or neither
    changes. ``after_save`` runs in the same transaction, so an error from
    it undoes the move as well. Returns the previous status.
    """
    fields = ["status", *changes]
    snapshot = {f.attname: getattr(instance, f.attname) for f in instance._meta.concrete_fields}
    try:
        with transaction.atomic():
            previous = lock_status(instance)
            table.check(previous, target)
            for name, value in changes.items():
                setattr(instance, name, value)
            instance.status = target
            instance.save(update_fields=[*fields, "updated_at"])
            if after_save is not None:
                after_save()
    except Exception:
        for name, value in snapshot.items():
            setattr(instance, name, value)
        raise
    return previous
