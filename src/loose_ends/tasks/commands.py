# src/loose_ends/tasks/commands.py

"""
Command schema.

A submitted form is decoded into exactly one of six command variants, selected
by the ``command`` tag. Anything that does not match one shape (unknown tag,
missing or extra keys, malformed id) is rejected with a CommandRejected carrying
a readable message.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from .task_models import CommandName

logger = logging.getLogger(__name__)

_UUID_RE = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")


class _Command(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    command: str

    @property
    def name(self) -> CommandName:
        return CommandName(self.command)


class _TargetedCommand(_Command):
    id: UUID

    @field_validator("id", mode="before")
    @classmethod
    def _canonical_id(cls, v: Any) -> Any:
        # Hyphenated 8-4-4-4-12 form only, either case.
        if isinstance(v, UUID):
            return v
        if not isinstance(v, str) or not _UUID_RE.fullmatch(v):
            raise ValueError("id must be a UUID in 8-4-4-4-12 form")
        return v

    @property
    def task_id(self) -> str:
        return str(self.id)


class TaskCreate(_Command):
    command: Literal["TodoCreate"]
    title: str | None = None


class TaskDelete(_TargetedCommand):
    command: Literal["TodoDelete"]


class TaskSetChecked(_TargetedCommand):
    command: Literal["TodoSetChecked"]
    checked: bool

    @field_validator("checked", mode="before")
    @classmethod
    def _checked_from_string(cls, v: Any) -> bool:
        # Forms only carry the literal strings; bools are allowed for internal callers.
        if isinstance(v, bool):
            return v
        if v == "true":
            return True
        if v == "false":
            return False
        raise ValueError('checked must be "true" or "false"')


class TaskSetTitle(_TargetedCommand):
    command: Literal["TodoSetTitle"]
    title: str


class TaskSetPinned(_TargetedCommand):
    command: Literal["TodoSetPinned"]


class DeleteAccount(_Command):
    command: Literal["DeleteAccount"]


Command = Annotated[
    Union[TaskCreate, TaskDelete, TaskSetChecked, TaskSetTitle, TaskSetPinned, DeleteAccount],
    Field(discriminator="command"),
]

# Commands that target one task and can be shown optimistically before they settle.
TargetedCommand = TaskDelete | TaskSetChecked | TaskSetTitle | TaskSetPinned

_COMMAND_ADAPTER: TypeAdapter[Command] = TypeAdapter(Command)


class CommandRejected(Exception):
    """Payload did not decode into any command variant."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


_TAGS = frozenset(c.value for c in CommandName)


def _format_errors(exc: ValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        # Drop the union tag from the location ("TaskDelete.id" -> "id").
        loc = [str(p) for p in err.get("loc", ()) if str(p) not in _TAGS]
        where = ".".join(loc) or "payload"
        parts.append(f"{where}: {err.get('msg', 'invalid')}")
    return "; ".join(parts) or "Invalid command"


def decode_command(payload: Mapping[str, Any]) -> Command:
    """
    Validate a raw key/value payload into one command variant.

    Multi-value mappings (e.g. form data) are flattened to their last value per key.
    Raises CommandRejected on any mismatch.
    """
    if hasattr(payload, "multi_items"):
        data = dict(payload.multi_items())  # type: ignore[attr-defined]
    else:
        data = dict(payload)

    try:
        return _COMMAND_ADAPTER.validate_python(data)
    except ValidationError as exc:
        message = _format_errors(exc)
        logger.debug("Rejected command payload keys=%s: %s", sorted(data), message)
        raise CommandRejected(message) from exc
