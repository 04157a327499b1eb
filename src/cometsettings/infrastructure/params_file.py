"""
comet.params import and export.

Only the enzyme-related parts of a params file are handled here: the
``search_enzyme_number``, ``sample_enzyme_number``, ``num_enzyme_termini``
and ``allowed_missed_cleavage`` keys, and the ``[COMET_ENZYME_INFO]`` block
that must end the file. A catalogue row in that block looks like::

    1.  Trypsin                1      KR          P
"""

from pathlib import Path
from typing import Optional

from ..config.settings import SearchSettings
from ..core.enzyme_config import find_enzyme, renumber_records
from ..core.models import FormatError, ReferenceRecord
from .record_codec import check_arity, parse_records, serialize_records
from .logging_config import get_logger

logger = get_logger(__name__)

ENZYME_SECTION = "[COMET_ENZYME_INFO]"

# params file key -> SearchSettings attribute
PARAM_KEYS = {
    "search_enzyme_number": "search_enzyme_number",
    "sample_enzyme_number": "sample_enzyme_number",
    "num_enzyme_termini": "enzyme_termini",
    "allowed_missed_cleavage": "allowed_missed_cleavages",
}

PARAM_COMMENTS = {
    "search_enzyme_number": "choose from list at end of this params file",
    "sample_enzyme_number": "Sample enzyme which is possibly different than the one applied to the search.",
    "num_enzyme_termini": "valid values are 1 (semi-digested), 2 (fully digested, default), 8 N-term, 9 C-term",
    "allowed_missed_cleavage": "maximum value is 5; for enzyme search",
}


def _split_param_line(line: str) -> Optional[tuple[str, str]]:
    """Split ``name = value  # comment`` into name and value, or None."""
    if line.startswith('#') or '=' not in line:
        return None
    name, value = line.split('=', 1)
    name_tokens = name.split()
    value_tokens = value.split('#', 1)[0].split()
    if not name_tokens or not value_tokens:
        return None
    return name_tokens[0], value_tokens[0]


def parse_enzyme_row(line: str) -> ReferenceRecord:
    """
    Parse one ``[COMET_ENZYME_INFO]`` row.

    Args:
        line: Row such as ``"1.  Trypsin  1  KR  P"``.

    Returns:
        Record ``(number, name, offset, break, no-break)``.

    Raises:
        FormatError: If the row does not have exactly five columns.
    """
    tokens = line.split()
    if len(tokens) != 5:
        raise FormatError(f"Enzyme row must have 5 columns, got {len(tokens)}: {line.strip()!r}")
    number = tokens[0].rstrip('.')
    if not number.isdigit():
        raise FormatError(f"Enzyme row does not start with a number: {line.strip()!r}")
    return (number, *tokens[1:])


def format_enzyme_row(record: ReferenceRecord) -> str:
    """Format a catalogue record as an aligned ``[COMET_ENZYME_INFO]`` row."""
    number, name, offset, break_aa, no_break_aa = record
    return f"{number + '.':<4}{name:<23}{offset:<7}{break_aa:<12}{no_break_aa}"


def parse_params_text(text: str) -> SearchSettings:
    """
    Read the enzyme settings out of params file text.

    Keys that are missing keep their default values. The catalogue falls
    back to the default one if the file has no enzyme block. Catalogue rows
    are renumbered by position and both enzyme keys follow their enzyme, so
    a file numbering its enzymes from 1 selects the same enzymes here.

    Args:
        text: Contents of a comet.params file.

    Returns:
        Normalized SearchSettings.

    Raises:
        FormatError: If a value or enzyme row cannot be parsed, or a selected
            enzyme number has no definition in the catalogue.
    """
    search = SearchSettings()
    records: list[ReferenceRecord] = []
    in_enzyme_section = False

    for line_number, line in enumerate(text.splitlines(), start=1):
        if in_enzyme_section:
            if line.strip() and not line.lstrip().startswith('#'):
                records.append(parse_enzyme_row(line))
            continue

        if line.startswith(ENZYME_SECTION):
            in_enzyme_section = True
            continue

        pair = _split_param_line(line)
        if pair is None or pair[0] not in PARAM_KEYS:
            continue

        name, value = pair
        try:
            setattr(search, PARAM_KEYS[name], int(value))
        except ValueError:
            raise FormatError(f"Line {line_number}: {name} must be an integer, got {value!r}") from None

    if records:
        search.enzyme_info = serialize_records(check_arity(records))
    search.normalize()

    # Enzymes are selected by number in the file but by position here
    catalogue = parse_records(search.enzyme_info)
    for attribute in ("search_enzyme_number", "sample_enzyme_number"):
        number = getattr(search, attribute)
        record = find_enzyme(catalogue, number)
        if record is None:
            raise FormatError(f"{attribute} {number} is missing definition in params file")
        position = catalogue.index(record)
        if position != number:
            logger.info(f"{attribute} {number} is enzyme {position} after renumbering")
        setattr(search, attribute, position)

    search.enzyme_info = serialize_records(renumber_records(catalogue))

    logger.debug(f"Parsed params with {len(catalogue)} enzymes")
    return search


def read_params_file(path: Path) -> SearchSettings:
    """
    Import enzyme settings from a comet.params file.

    Args:
        path: Path to the params file.

    Returns:
        Normalized SearchSettings.

    Raises:
        FileNotFoundError: If the file does not exist.
        FormatError: If the enzyme settings cannot be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Params file does not exist: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()

    search = parse_params_text(text)
    logger.info(f"Imported enzyme settings from {path}")
    return search


def _format_param(name: str, value: int) -> str:
    return f"{f'{name} = {value}':<39}# {PARAM_COMMENTS[name]}"


def render_params(search: SearchSettings, template: Optional[str] = None) -> str:
    """
    Render enzyme settings as params file text.

    With a template, the enzyme keys are rewritten in place and the enzyme
    block is replaced; all other lines are kept. Without one, a minimal
    file containing only the enzyme settings is produced.

    Args:
        search: Settings to write.
        template: Existing params file text to update.

    Returns:
        Params file text ending in the ``[COMET_ENZYME_INFO]`` block.
    """
    values = {name: getattr(search, attribute) for name, attribute in PARAM_KEYS.items()}
    lines = []

    if template is None:
        lines.extend(["#", "# search enzyme", "#"])
        lines.extend(_format_param(name, value) for name, value in values.items())
        lines.append("")
    else:
        written = set()
        for line in template.splitlines():
            if line.startswith(ENZYME_SECTION):
                break
            pair = _split_param_line(line)
            if pair is not None and pair[0] in values:
                lines.append(_format_param(pair[0], values[pair[0]]))
                written.add(pair[0])
            else:
                lines.append(line)
        # Drop the comment banner that introduced the old enzyme block
        while lines and lines[-1].startswith('#'):
            lines.pop()
        for name, value in values.items():
            if name not in written:
                lines.append(_format_param(name, value))

    lines.extend([
        "#",
        "# COMET_ENZYME_INFO _must_ be at the end of this parameters file",
        "#",
        ENZYME_SECTION,
    ])
    lines.extend(format_enzyme_row(record) for record in parse_records(search.enzyme_info))
    return "\n".join(lines) + "\n"


def write_params_file(path: Path, search: SearchSettings) -> None:
    """
    Export enzyme settings to a params file.

    An existing file is updated in place; otherwise a new one is created.

    Args:
        path: Destination file.
        search: Settings to write.
    """
    template = None
    if path.exists():
        with open(path, 'r', encoding='utf-8') as f:
            template = f.read()

    text = render_params(search, template)

    temp_file = path.with_suffix(path.suffix + '.tmp')
    with open(temp_file, 'w', encoding='utf-8') as f:
        f.write(text)
    temp_file.replace(path)

    logger.info(f"Exported enzyme settings to {path}")
