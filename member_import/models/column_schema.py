from __future__ import annotations

from dataclasses import dataclass

"""Member column schema.

Single ordered definition of the spreadsheet columns. The template generator
emits these headers (with widths and documentation), the normalizer reads the
same headers into CandidateRow attributes, and the committer maps the same
attributes to persistence columns. Changing a column here changes all three.
"""

__all__ = [
    "ColumnSpec",
    "MEMBER_COLUMNS",
    "DEFAULT_COLUMN_WIDTH",
    "column_by_key",
    "column_keys",
]

DEFAULT_COLUMN_WIDTH = 18


@dataclass(frozen=True)
class ColumnSpec:
    """One spreadsheet column of the member import.

    Attributes:
        key: Header name in the spreadsheet (and template)
        attribute: CandidateRow attribute the column normalizes into
        required: Whether the column must be filled for a row to be valid
        description: Accepted values / format, shown on the documentation sheet
        width: Display width hint for the template data sheet
        record_key: Column name in the persistence record
    """
    key: str
    attribute: str
    required: bool
    description: str
    width: int = DEFAULT_COLUMN_WIDTH
    record_key: str | None = None

    @property
    def persistence_key(self) -> str:
        return self.record_key or self.key


MEMBER_COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec(
        key="nama_lengkap",
        attribute="full_name",
        required=True,
        description="Required. Full name of the member.",
        width=25,
    ),
    ColumnSpec(
        key="tempat_lahir",
        attribute="birth_place",
        required=False,
        description="Optional. City of birth.",
    ),
    ColumnSpec(
        key="tanggal_lahir",
        attribute="birth_date",
        required=False,
        description="Optional. Format: YYYY-MM-DD (example: 2005-03-15) or a spreadsheet date.",
        width=15,
    ),
    ColumnSpec(
        key="nbm",
        attribute="member_number",
        required=False,
        description="Optional. Member number (NBM).",
    ),
    ColumnSpec(
        key="jenis_kelamin",
        attribute="gender",
        required=True,
        description="Required. L = male, P = female. Empty defaults to L.",
    ),
    ColumnSpec(
        key="unit_latihan",
        attribute="training_unit",
        required=False,
        description="Optional. Training unit name.",
    ),
    ColumnSpec(
        key="cabang",
        attribute="branch",
        required=False,
        description="Optional. Branch name.",
    ),
    ColumnSpec(
        key="tingkatan",
        attribute="rank_name",
        required=False,
        description="Optional. Rank name as registered (e.g. Polos, Jambon). Unknown names import without a rank.",
        record_key="tingkatan_id",
    ),
    ColumnSpec(
        key="no_whatsapp",
        attribute="whatsapp_number",
        required=False,
        description="Optional. WhatsApp number.",
    ),
    ColumnSpec(
        key="status_aktif",
        attribute="active_status",
        required=False,
        description="Optional. Ya = active, Tidak = inactive. Default: Ya.",
    ),
)

_BY_KEY = {c.key: c for c in MEMBER_COLUMNS}


def column_keys() -> list[str]:
    """Header names in template order."""
    return [c.key for c in MEMBER_COLUMNS]


def column_by_key(key: str) -> ColumnSpec:
    """Return the column spec for a header name (KeyError if unknown)."""
    return _BY_KEY[key]
