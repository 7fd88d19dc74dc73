"""
Content validation for the article archive.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

import tqdm

from rootbyte.config import get_config
from rootbyte.core.errors import ContentError
from rootbyte.core.frontmatter import FRONTMATTER_RE, parse_frontmatter
from rootbyte.utils.nlp import estimate_reading_time, word_count

# Configure logging
logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [
    'title', 'date', 'category', 'tags', 'root_year',
    'root_who', 'root_where', 'root_connection', 'dyk_fact'
]

REQUIRED_SECTIONS = [
    '## The Modern Story',
    '## ROOT: Going Back to',
    '## Did You Know',
    '## Why It Matters Today'
]


@dataclass
class ValidationResult:
    file_name: str
    errors: List[str] = field(default_factory=list)
    word_count: int = 0
    estimated_time: int = 0

    @property
    def valid(self) -> bool:
        return not self.errors


def _as_int(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def validate_text(file_name: str, text: str, today: Optional[date] = None) -> ValidationResult:
    """
    Check one article's metadata, section headings and length.

    Args:
        file_name: Name reported alongside the errors
        text: Raw file contents
        today: Reference date for the root_year upper bound

    Returns:
        ValidationResult listing every problem found
    """
    result = ValidationResult(file_name=file_name)
    if not FRONTMATTER_RE.match(text):
        result.errors.append('Missing frontmatter')
        return result

    meta, body = parse_frontmatter(text)
    min_words = get_config('validation.min_words', 300)
    words_per_minute = get_config('validation.words_per_minute', 200)

    for name in REQUIRED_FIELDS:
        value = meta.get(name)
        if value is None or value == '':
            result.errors.append(f'Missing required field: {name}')

    for section in REQUIRED_SECTIONS:
        if section not in body:
            result.errors.append(f'Missing required section: {section}')

    result.word_count = word_count(body)
    result.estimated_time = estimate_reading_time(body, words_per_minute)
    if result.word_count < min_words:
        result.errors.append(f'Article too short: {result.word_count} words (minimum {min_words})')

    if meta.get('root_year') not in (None, ''):
        year = _as_int(meta['root_year'])
        current_year = (today or date.today()).year
        if year is None or year > current_year or year < get_config('validation.min_root_year', 1800):
            result.errors.append(f"Invalid root_year: {meta['root_year']}")

    declared = _as_int(meta.get('reading_time'))
    tolerance = get_config('validation.reading_time_tolerance', 2)
    if declared and abs(declared - result.estimated_time) > tolerance:
        result.errors.append(
            f'Reading time mismatch: declared {declared}min, estimated {result.estimated_time}min'
        )

    return result


def validate_article(path: Path, today: Optional[date] = None) -> ValidationResult:
    return validate_text(path.name, path.read_text(encoding='utf-8'), today=today)


def validate_all(articles_dir: Optional[Path] = None, today: Optional[date] = None) -> List[ValidationResult]:
    """
    Validate every article; a bad file never stops the scan.

    Raises:
        ContentError: If the articles directory is missing
    """
    articles_dir = Path(articles_dir or get_config('paths.articles_dir'))
    if not articles_dir.is_dir():
        raise ContentError(f"Articles directory not found: {articles_dir}")

    files = sorted(path for path in articles_dir.glob('*.md') if path.is_file())
    logger.info(f"Validating {len(files)} articles")
    results = []
    for path in tqdm.tqdm(files, desc="Validating", disable=None):
        try:
            results.append(validate_article(path, today=today))
        except (OSError, UnicodeDecodeError) as e:
            results.append(ValidationResult(file_name=path.name, errors=[f'Unreadable file: {e}']))
    return results


def report(results: List[ValidationResult]) -> Dict[str, int]:
    """
    Log every result and return the summary counts.
    """
    valid = 0
    errors = 0
    for result in results:
        if result.valid:
            logger.info(f"OK {result.file_name} ({result.word_count} words, ~{result.estimated_time}min)")
            valid += 1
            continue
        logger.error(f"FAIL {result.file_name}")
        for error in result.errors:
            logger.error(f"   - {error}")
        errors += len(result.errors)

    logger.info(f"Validation summary: {valid} valid, {len(results) - valid} with errors, {errors} total errors")
    return {"valid": valid, "invalid": len(results) - valid, "errors": errors}
