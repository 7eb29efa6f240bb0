"""
Reconciliation Configuration

Defines ReconConfig dataclass, matching thresholds, and the curated
exception-rule pairs.
"""

import os
from dataclasses import dataclass, fields
from decimal import Decimal
from typing import List, Tuple

from dotenv import load_dotenv


# Currency tolerance used for every amount comparison
AMOUNT_EPSILON = Decimal("0.01")

# ============================================================================
# CLIENT THRESHOLDS
# ============================================================================

CLIENT_EXCEPTION_THRESHOLD = 0.75
CLIENT_FUZZY_THRESHOLD = 0.70
CLIENT_RELAXED_THRESHOLD = 0.50
CLIENT_ZERO_OUT_MIN_SIMILARITY = 0.3

# ============================================================================
# EMPLOYEE THRESHOLDS
# ============================================================================

EMPLOYEE_FUZZY_THRESHOLD = 0.80
EMPLOYEE_RELAXED_THRESHOLD = 0.60
EMPLOYEE_CONTEXT_THRESHOLD = 0.6
EMPLOYEE_COMPONENT_THRESHOLD = 0.8
EMPLOYEE_ZERO_OUT_MIN_SIMILARITY = 0.3

# Context scoring: exact amount boost, and floor/weight of the amount multiplier
CONTEXT_AMOUNT_BOOST = 0.3
CONTEXT_AMOUNT_FLOOR = 0.3
CONTEXT_AMOUNT_WEIGHT = 0.7

# Fixed heuristic scores
FIRST_WORDS_SCORE = 0.85
CONTAINMENT_SCORE = 0.75
PREFIX_NAME_SCORE = 0.95
CONTAINMENT_MIN_LENGTH = 3

DEFAULT_PAYMENT_TYPE = "Research pymt method"


# ============================================================================
# CURATED EXCEPTION RULES
# ============================================================================

# (ledger name, known alias) - mirrored automatically by ExceptionRuleTable
EXCEPTION_PAIRS: List[Tuple[str, str]] = [
    ("Complete Mechanical Services", "CMS- Complete Mechanical Services"),
    ("LCI", "Lippert"),
    ("JBI Electrical Systems", "OWL Services (JBI Electrical Systems Inc.)"),
    ("TJ Maxx ARRC", "TJX Companies"),
    ("Carl Nelson & Company", "Carl A Nelson"),
    ("Elgin Separation Solutions", "Elgin Power Solutions"),
    ("Gaylor Electric", "Gaylor Group"),
    ("InPwr Inc", "In Pwr Inc"),
]

ENV_PREFIX = "LEDGER_RECON_"


@dataclass
class ReconConfig:
    """Overridable thresholds and behavior switches for a reconciliation run."""
    client_exception_threshold: float = CLIENT_EXCEPTION_THRESHOLD
    client_fuzzy_threshold: float = CLIENT_FUZZY_THRESHOLD
    client_relaxed_threshold: float = CLIENT_RELAXED_THRESHOLD
    client_zero_out_min_similarity: float = CLIENT_ZERO_OUT_MIN_SIMILARITY

    employee_fuzzy_threshold: float = EMPLOYEE_FUZZY_THRESHOLD
    employee_relaxed_threshold: float = EMPLOYEE_RELAXED_THRESHOLD
    employee_context_threshold: float = EMPLOYEE_CONTEXT_THRESHOLD
    employee_component_threshold: float = EMPLOYEE_COMPONENT_THRESHOLD
    employee_zero_out_min_similarity: float = EMPLOYEE_ZERO_OUT_MIN_SIMILARITY

    # Iterate side-A names lexicographically instead of first-seen order
    sort_names: bool = False
    # Use amount-aware employee matching inside matched clients
    use_employee_context: bool = True

    @classmethod
    def from_env(cls) -> "ReconConfig":
        """
        Build a config from LEDGER_RECON_* environment variables.

        Loads a .env file first if one is present. Unset variables keep
        their defaults, e.g. LEDGER_RECON_CLIENT_FUZZY_THRESHOLD=0.75.
        """
        load_dotenv()
        overrides = {}
        for f in fields(cls):
            raw = os.environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw.strip() == "":
                continue
            if f.type in (bool, "bool"):
                overrides[f.name] = raw.strip().lower() in ("1", "true", "yes", "on")
            else:
                overrides[f.name] = float(raw)
        return cls(**overrides)


def get_log_level() -> str:
    """Log level name from LEDGER_RECON_LOG_LEVEL (default INFO)."""
    load_dotenv()
    return os.environ.get(ENV_PREFIX + "LOG_LEVEL", "INFO").upper()


def get_exceptions_file() -> str:
    """Path of an extra exception-rules CSV, or empty string."""
    load_dotenv()
    return os.environ.get(ENV_PREFIX + "EXCEPTIONS_FILE", "")
