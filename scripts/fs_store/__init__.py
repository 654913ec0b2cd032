"""File-system backed item repository."""

from .naming import parse_record_stem, record_file_name, record_stem
from .record_types import RecordType
from .repository import FsRepository
from .sync_protocol import ChangeEntry, SyncOperation
