"""
Parcel code conversion between the MAJIC and CNIG PCI formats.

French cadastral parcels are identified two ways:
- MAJIC (14 characters): DDCCCSSSSXNNNN, used by the social housing registry
- CNIG PCI (12 characters): DDCCCSSSNNNN, used by the cadastral geometries

Example:
    MAJIC  67482 000 010 0017  ->  CNIG  67482 001 0017
"""

from .constants import LEGACY_CODE_LENGTH


def normalize_code(code: str) -> str:
    """
    Convert a MAJIC parcel code to CNIG PCI format.

    The transform is purely positional: department + commune (0-5),
    section (7-10) and parcel number (10-14). Characters are not validated.

    Args:
        code: Parcel code of any length

    Returns:
        The 12-character CNIG code, or '' if the input is not 14 characters

    Examples:
        >>> normalize_code('67482000010017')
        '674820010017'
        >>> normalize_code('INVALID')
        ''
    """
    if len(code) != LEGACY_CODE_LENGTH:
        return ''
    return code[0:5] + code[7:10] + code[10:14]


def resolve_parcel_id(parcel_id: str) -> str:
    """
    Auto-detect the format of a parcel id and return its CNIG form.

    14-character ids are treated as MAJIC and converted. Anything else is
    assumed to already be CNIG and is returned unchanged, including
    malformed ids of other lengths.
    """
    if len(parcel_id) == LEGACY_CODE_LENGTH:
        return normalize_code(parcel_id)
    return parcel_id
