"""Derived views of the stream directory and their change-only publication.

Four values are derived from a directory snapshot and pushed to the host:
variable definitions, variable values, action choices and feedback choices.
Each one is cached after publishing and only pushed again when the freshly
computed value differs from the cached one, so a poll that changes nothing
causes no host updates at all.
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from interfaces.surface_interface import IControlSurface
from services.stream_directory import DirectorySnapshot

logger = logging.getLogger(__name__)

_UNSAFE_VARIABLE_CHARS = re.compile(r'[^a-zA-Z0-9_-]')

FEEDBACK_STREAM_ENABLED = 'streamEnabled'
FEEDBACK_PLATFORMS_ENABLED = 'platformsEnabled'
ACTION_ENABLE_STREAM = 'enableStream'
ACTION_ENABLE_PLATFORM = 'enablePlatform'

class OnOffToggle(Enum):
    ON = 'enable'
    OFF = 'disable'
    TOGGLE = 'toggle'

@dataclass(frozen=True)
class Choice:
    label: str
    value: str

@dataclass(frozen=True)
class VariableDefinition:
    variable_id: str
    name: str

def sanitize_variable_id(variable_id: str) -> str:
    return _UNSAFE_VARIABLE_CHARS.sub('_', variable_id)

class _VariableBuilder:
    def __init__(self):
        self.definitions: List[VariableDefinition] = []
        self.values: Dict[str, Any] = {}

    def add(self, variable_id: str, name: str, value: Any) -> None:
        variable_id = sanitize_variable_id(variable_id)
        self.definitions.append(VariableDefinition(variable_id, name))
        self.values[variable_id] = value

def compute_variables(snapshot: DirectorySnapshot) -> Tuple[Tuple[VariableDefinition, ...], Mapping[str, Any]]:
    """Variable definitions and values for every stream and platform"""
    builder = _VariableBuilder()
    for stream in snapshot.streams:
        status = stream.broadcasting_status or 'undefined'

        builder.add(f"stream_{stream.id}_name", f"Stream '{stream.id}' Name", stream.name)
        builder.add(f"stream_{stream.id}_enabled", f"Stream '{stream.id}' Enabled", stream.enabled)
        builder.add(f"stream_{stream.id}_status", f"Stream '{stream.id}' Status", status)
        builder.add(f"stream_{stream.id}_ingest_server", f"Stream '{stream.id}' ingest server", stream.ingest_server)
        builder.add(f"stream_{stream.id}_ingest_key", f"Stream '{stream.id}' ingest key", stream.ingest_key)

        builder.add(f"stream_{stream.name}_id", f"Stream '{stream.name}' ID", stream.id)
        builder.add(f"stream_{stream.name}_enabled", f"Stream '{stream.name}' Enabled", stream.enabled)
        builder.add(f"stream_{stream.name}_status", f"Stream '{stream.name}' Status", status)
        builder.add(f"stream_{stream.name}_ingest_server", f"Stream '{stream.name}' ingest server", stream.ingest_server)
        builder.add(f"stream_{stream.name}_ingest_key", f"Stream '{stream.name}' ingest key", stream.ingest_key)

        for platform in stream.platforms:
            prefix = f"stream_{stream.name}_platform_{platform.name}"
            label = f"Stream '{stream.name}', platform '{platform.name}'"
            builder.add(f"{prefix}_status", f"{label} status", platform.broadcasting_status or 'undefined')
            builder.add(f"{prefix}_enabled", f"{label} enabled", platform.enabled)

    return tuple(builder.definitions), MappingProxyType(builder.values)

def stream_choices(snapshot: DirectorySnapshot) -> Tuple[Choice, ...]:
    """Every stream name, followed by every stream id"""
    names = [Choice(stream.name, stream.name) for stream in snapshot.streams]
    ids = [Choice(stream.id, stream.id) for stream in snapshot.streams]
    return tuple(names + ids)

def platform_choices(snapshot: DirectorySnapshot) -> Tuple[Choice, ...]:
    return tuple(Choice(ref, ref) for ref in snapshot.references)

def on_off_choices() -> Tuple[Choice, ...]:
    return tuple(Choice(item.value, item.value) for item in OnOffToggle)

def compute_action_choices(snapshot: DirectorySnapshot) -> Mapping[str, Mapping[str, Tuple[Choice, ...]]]:
    return MappingProxyType({
        ACTION_ENABLE_STREAM: MappingProxyType({
            'stream': stream_choices(snapshot),
            'onoff': on_off_choices()
        }),
        ACTION_ENABLE_PLATFORM: MappingProxyType({
            'platform': platform_choices(snapshot),
            'onoff': on_off_choices()
        })
    })

def compute_feedback_choices(snapshot: DirectorySnapshot) -> Mapping[str, Mapping[str, Tuple[Choice, ...]]]:
    return MappingProxyType({
        FEEDBACK_STREAM_ENABLED: MappingProxyType({'stream': stream_choices(snapshot)}),
        FEEDBACK_PLATFORMS_ENABLED: MappingProxyType({'platform': platform_choices(snapshot)})
    })

class DerivedViewPublisher:
    """Computes the derived views and publishes the ones that changed"""

    def __init__(self, surface: IControlSurface):
        self.surface = surface
        self.variable_definitions_cache: Optional[Tuple[VariableDefinition, ...]] = None
        self.variable_values_cache: Optional[Mapping[str, Any]] = None
        self.action_choices_cache: Optional[Mapping[str, Any]] = None
        self.feedback_choices_cache: Optional[Mapping[str, Any]] = None

    def publish(self, snapshot: DirectorySnapshot) -> List[str]:
        """Publish every view that differs from its cache, returns the names of the updated views"""
        updated = []
        definitions, values = compute_variables(snapshot)

        if definitions != self.variable_definitions_cache:
            self.surface.set_variable_definitions(definitions)
            self.variable_definitions_cache = definitions
            updated.append('variable_definitions')

        values_changed = values != self.variable_values_cache
        if values_changed:
            self.surface.set_variable_values(values)
            self.variable_values_cache = values
            updated.append('variable_values')

        actions = compute_action_choices(snapshot)
        if actions != self.action_choices_cache:
            self.surface.set_action_definitions(actions)
            self.action_choices_cache = actions
            updated.append('action_choices')

        feedbacks = compute_feedback_choices(snapshot)
        if feedbacks != self.feedback_choices_cache:
            self.surface.set_feedback_definitions(feedbacks)
            self.feedback_choices_cache = feedbacks
            updated.append('feedback_choices')

        if values_changed:
            self.surface.check_feedbacks(FEEDBACK_STREAM_ENABLED, FEEDBACK_PLATFORMS_ENABLED)

        if updated:
            logger.debug(f"Derived views updated: {', '.join(updated)}")
        return updated

    def reset(self) -> None:
        """Forget what was published so the next publish pushes everything"""
        self.variable_definitions_cache = None
        self.variable_values_cache = None
        self.action_choices_cache = None
        self.feedback_choices_cache = None
