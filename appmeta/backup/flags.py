"""Backup capture flags."""

from enum import IntFlag
from typing import Iterable, List, Union


class BackupFlag(IntFlag):
    """Known capture options and their bit positions."""

    NOTHING = 0
    SOURCE = (1 << 0)
    DATA = (1 << 1)
    EXT_DATA = (1 << 2)
    EXCLUDE_CACHE = (1 << 3)
    RULES = (1 << 4)
    NO_SIGNATURE_CHECK = (1 << 5)
    SOURCE_APK_ONLY = (1 << 6)
    EXT_OBB_MEDIA = (1 << 7)
    MULTIPLE = (1 << 8)
    KEY_STORE = (1 << 9)


FlagName = Union[str, BackupFlag]


def _to_flag(name: FlagName) -> BackupFlag:
    if isinstance(name, BackupFlag):
        return name

    try:
        return BackupFlag[str(name).upper()]
    except KeyError:
        raise ValueError(f"Unknown backup flag: {name!r}") from None


class BackupFlags:
    """Immutable set of capture options stored as a raw integer.

    Any integer is accepted. Bits outside :class:`BackupFlag` are kept as they
    are so that flags written by a newer release survive a round trip.
    """

    __slots__ = ("_flags",)

    def __init__(self, flags: int = 0) -> None:
        object.__setattr__(self, "_flags", int(flags))

    @classmethod
    def from_names(cls, names: Iterable[FlagName] = ()) -> "BackupFlags":
        """Create flags from capability names such as ``"data"`` or ``BackupFlag.RULES``."""
        value = 0
        for name in names:
            value |= _to_flag(name)
        return cls(value)

    def __setattr__(self, name, value):
        raise AttributeError("BackupFlags is immutable")

    @property
    def flags(self) -> int:
        """Raw integer value, as written to the metadata file."""
        return self._flags

    def __int__(self) -> int:
        return self._flags

    def is_set(self, flag: FlagName) -> bool:
        bit = int(_to_flag(flag))
        return bit != 0 and (self._flags & bit) == bit

    def names(self) -> List[str]:
        """Names of the known flags that are set."""
        return [flag.name for flag in BackupFlag if flag and self.is_set(flag)]

    def union(self, *names: FlagName) -> "BackupFlags":
        return BackupFlags(self._flags | BackupFlags.from_names(names).flags)

    def difference(self, *names: FlagName) -> "BackupFlags":
        return BackupFlags(self._flags & ~BackupFlags.from_names(names).flags)

    @property
    def backup_source(self) -> bool:
        return self.is_set(BackupFlag.SOURCE)

    @property
    def backup_data(self) -> bool:
        return self.is_set(BackupFlag.DATA)

    @property
    def backup_ext_data(self) -> bool:
        return self.is_set(BackupFlag.EXT_DATA)

    @property
    def exclude_cache(self) -> bool:
        return self.is_set(BackupFlag.EXCLUDE_CACHE)

    @property
    def backup_rules(self) -> bool:
        return self.is_set(BackupFlag.RULES)

    @property
    def skip_signature_check(self) -> bool:
        return self.is_set(BackupFlag.NO_SIGNATURE_CHECK)

    @property
    def backup_source_apk_only(self) -> bool:
        return self.is_set(BackupFlag.SOURCE_APK_ONLY)

    @property
    def backup_ext_obb_media(self) -> bool:
        return self.is_set(BackupFlag.EXT_OBB_MEDIA)

    @property
    def backup_multiple(self) -> bool:
        return self.is_set(BackupFlag.MULTIPLE)

    @property
    def backup_key_store(self) -> bool:
        return self.is_set(BackupFlag.KEY_STORE)

    def __eq__(self, other) -> bool:
        if isinstance(other, BackupFlags):
            return self._flags == other._flags
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._flags)

    def __reduce__(self):
        return (BackupFlags, (self._flags,))

    def __repr__(self) -> str:
        names = "|".join(self.names()) or "NOTHING"
        return f"BackupFlags({self._flags}: {names})"
