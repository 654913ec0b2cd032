"""Item kinds, their shared lifecycle, and conflict reconciliation."""

from .actions import Action, ActionDispatcher
from .change_list import ChangeList
from .codec import decode_item, encode_item
from .conflict import (
    AlwaysEscalate,
    Conflict,
    ConflictState,
    FieldUnion,
    LastWriteWins,
    MergeEngine,
    MergePolicy,
    MergeReport,
)
from .errors import (
    ConfigurationError,
    ConflictUnresolvable,
    DeserializeError,
    FieldError,
    ItemNotFoundError,
    ItemStoreError,
    ProgrammingError,
    RenderError,
    UnknownActionError,
    ValidationError,
)
from .item import Item, ItemBase, ItemBaseForSerde
from .item_data import ItemData
from .registry import ItemTypePolicy, TypeRegistry
from .response import ActionResponse, Response
from .store import ItemStore
from .world import World, session
