"""
Curated client-name aliases that override algorithmic scoring.

The table is built once from (primary, alias) pairs, mirrored so either
side resolves to the other, and never modified afterwards. Pairs from an
exceptions file are only added by build_default_table(), which the CLI
calls at startup.
"""

import csv
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .config import EXCEPTION_PAIRS, get_exceptions_file
from .errors import LoaderError

logger = logging.getLogger(__name__)


class ExceptionRuleTable:
    """
    Read-only, case-insensitive, bidirectional alias map.

    Usage:
        table = ExceptionRuleTable([("LCI", "Lippert")])
        table.lookup("lci")      # 'Lippert'
        table.lookup("LIPPERT")  # 'LCI'
    """

    def __init__(self, pairs: Iterable[Tuple[str, str]]):
        rules = {}
        base_pairs = []
        for primary, alias in pairs:
            primary, alias = primary.strip(), alias.strip()
            if not primary or not alias:
                continue
            base_pairs.append((primary, alias))
            rules[_key(primary)] = alias
            rules[_key(alias)] = primary

        self._pairs: Tuple[Tuple[str, str], ...] = tuple(base_pairs)
        self._rules: Mapping[str, str] = MappingProxyType(rules)

    def lookup(self, name: Optional[str]) -> Optional[str]:
        """Alias for a name, or None."""
        if not name:
            return None
        return self._rules.get(_key(name))

    @property
    def pairs(self) -> Tuple[Tuple[str, str], ...]:
        """The curated base pairs, before mirroring."""
        return self._pairs

    @property
    def rules(self) -> Mapping[str, str]:
        """Lower-cased name -> alias, both directions."""
        return self._rules

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __repr__(self) -> str:
        return f"ExceptionRuleTable({len(self._pairs)} pairs)"


def _key(name: str) -> str:
    return name.strip().lower()


def load_exception_pairs(path: Union[str, Path]) -> List[Tuple[str, str]]:
    """
    Read extra alias pairs from a CSV with `primary` and `alias` columns.

    Rows missing either value are skipped with a warning.
    """
    path = Path(path)
    if not path.exists():
        raise LoaderError(f"Exception rules file not found: {path}")

    pairs = []
    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames or not {"primary", "alias"} <= set(reader.fieldnames):
            raise LoaderError(f"{path}: expected 'primary' and 'alias' columns")
        for line_no, row in enumerate(reader, start=2):
            primary = (row.get("primary") or "").strip()
            alias = (row.get("alias") or "").strip()
            if not primary or not alias:
                logger.warning(f"{path}:{line_no}: skipping incomplete exception rule")
                continue
            pairs.append((primary, alias))
    return pairs


def build_default_table(extra_file: Optional[Union[str, Path]] = None) -> ExceptionRuleTable:
    """
    Curated pairs plus pairs from an exceptions file.

    The file defaults to LEDGER_RECON_EXCEPTIONS_FILE and is read on every
    call. Raises LoaderError if it is missing or malformed.
    """
    pairs = list(EXCEPTION_PAIRS)
    extra_file = extra_file or get_exceptions_file()
    if extra_file:
        extra = load_exception_pairs(extra_file)
        logger.info(f"Loaded {len(extra)} exception rules from {extra_file}")
        pairs.extend(extra)
    return ExceptionRuleTable(pairs)


# Curated pairs only; the environment is never read at import
DEFAULT_EXCEPTION_RULES = ExceptionRuleTable(EXCEPTION_PAIRS)
