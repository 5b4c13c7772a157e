"""Reference type table shared by the decoder and the encoder.

Each row binds a canonical type identifier to the name and numeric code
EndNote writes in ``<ref-type name="...">N</ref-type>``. The table is
append-only; both lookup indexes are built once at import time.
"""

from dataclasses import dataclass
from types import MappingProxyType

__all__ = [
    "RefType",
    "REF_TYPES",
    "ref_type_for_wire_name",
    "ref_type_for_canonical_id",
]


@dataclass(frozen=True)
class RefType:
    """One row of the type table.

    Attributes
    ----------
    canonical_id : str
        Canonical type identifier (e.g., 'journalArticle').
    wire_name : str
        EndNote type name (e.g., 'Journal Article').
    wire_id : int
        EndNote numeric type code.
    """

    canonical_id: str
    wire_name: str
    wire_id: int


REF_TYPES: tuple[RefType, ...] = (
    RefType("aggregatedDatabase", "Aggregated Database", 55),
    RefType("ancientText", "Ancient Text", 51),
    RefType("artwork", "Artwork", 2),
    RefType("audiovisualMaterial", "Audiovisual Material", 3),
    RefType("bill", "Bill", 4),
    RefType("blog", "Blog", 56),
    RefType("book", "Book", 6),
    RefType("bookSection", "Book Section", 5),
    RefType("case", "Case", 7),
    RefType("catalog", "Catalog", 8),
    RefType("chartOrTable", "Chart or Table", 38),
    RefType("classicalWork", "Classical Work", 49),
    RefType("computerProgram", "Computer Program", 9),
    RefType("conferencePaper", "Conference Paper", 47),
    RefType("conferenceProceedings", "Conference Proceedings", 10),
    RefType("dataset", "Dataset", 59),
    RefType("dictionary", "Dictionary", 52),
    RefType("editedBook", "Edited Book", 28),
    RefType("electronicArticle", "Electronic Article", 43),
    RefType("electronicBook", "Electronic Book", 44),
    RefType("electronicBookSection", "Electronic Book Section", 60),
    RefType("encyclopedia", "Encyclopedia", 53),
    RefType("equation", "Equation", 39),
    RefType("figure", "Figure", 37),
    RefType("filmOrBroadcast", "Film or Broadcast", 21),
    RefType("generic", "Generic", 13),
    RefType("governmentDocument", "Government Document", 46),
    RefType("grant", "Grant", 54),
    RefType("hearing", "Hearing", 14),
    RefType("journalArticle", "Journal Article", 17),
    RefType("legalRuleOrRegulation", "Legal Rule or Regulation", 50),
    RefType("magazineArticle", "Magazine Article", 19),
    RefType("manuscript", "Manuscript", 36),
    RefType("map", "Map", 20),
    RefType("music", "Music", 61),
    RefType("newspaperArticle", "Newspaper Article", 23),
    RefType("onlineDatabase", "Online Database", 45),
    RefType("onlineMultimedia", "Online Multimedia", 48),
    RefType("pamphlet", "Pamphlet", 24),
    RefType("patent", "Patent", 25),
    RefType("personalCommunication", "Personal Communication", 26),
    RefType("report", "Report", 27),
    RefType("serial", "Serial", 57),
    RefType("standard", "Standard", 58),
    RefType("statute", "Statute", 31),
    RefType("thesis", "Thesis", 32),
    RefType("unpublished", "Unpublished Work", 34),
    RefType("web", "Web Page", 12),
)

_BY_WIRE_NAME = MappingProxyType({row.wire_name: row for row in REF_TYPES})
_BY_CANONICAL_ID = MappingProxyType({row.canonical_id: row for row in REF_TYPES})


def ref_type_for_wire_name(wire_name: str) -> RefType | None:
    """Look up a type row by its EndNote name.

    Parameters
    ----------
    wire_name : str
        Value of the ``name`` attribute of ``<ref-type>``.

    Returns
    -------
    RefType | None
        Matching row, or None if the name is not in the table.
    """
    return _BY_WIRE_NAME.get(wire_name)


def ref_type_for_canonical_id(canonical_id: str) -> RefType | None:
    """Look up a type row by its canonical identifier.

    Parameters
    ----------
    canonical_id : str
        Canonical type identifier (e.g., 'report').

    Returns
    -------
    RefType | None
        Matching row, or None if the identifier is not in the table.
    """
    return _BY_CANONICAL_ID.get(canonical_id)
