"""Extraction of plain values from typed Notion properties."""
import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


def _join_plain_text(spans: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    """Concatenate the plain_text of rich text spans, None when empty."""
    text = ''.join(span.get('plain_text') or '' for span in spans or [])
    return text or None


def _option_name(option: Optional[Dict[str, Any]]) -> Optional[str]:
    return (option or {}).get('name') or None


def _extract_title(prop: Dict[str, Any]) -> Optional[str]:
    return _join_plain_text(prop.get('title'))


def _extract_rich_text(prop: Dict[str, Any]) -> Optional[str]:
    return _join_plain_text(prop.get('rich_text'))


def _extract_number(prop: Dict[str, Any]) -> Optional[float]:
    return prop.get('number')


def _extract_select(prop: Dict[str, Any]) -> Optional[str]:
    return _option_name(prop.get('select'))


def _extract_status(prop: Dict[str, Any]) -> Optional[str]:
    return _option_name(prop.get('status'))


def _extract_multi_select(prop: Dict[str, Any]) -> List[str]:
    return [item.get('name') for item in prop.get('multi_select') or []]


def _extract_date(prop: Dict[str, Any]) -> Optional[str]:
    # End dates are not published
    return (prop.get('date') or {}).get('start') or None


def _extract_checkbox(prop: Dict[str, Any]) -> bool:
    return bool(prop.get('checkbox'))


def _extract_relation(prop: Dict[str, Any]) -> List[str]:
    return [rel.get('id') for rel in prop.get('relation') or []]


def _extract_people(prop: Dict[str, Any]) -> List[str]:
    return [person.get('id') for person in prop.get('people') or []]


def _extract_actor(key: str) -> Callable[[Dict[str, Any]], Optional[str]]:
    def extract(prop: Dict[str, Any]) -> Optional[str]:
        return (prop.get(key) or {}).get('id') or None
    return extract


def _extract_scalar(key: str) -> Callable[[Dict[str, Any]], Optional[str]]:
    def extract(prop: Dict[str, Any]) -> Optional[str]:
        return prop.get(key) or None
    return extract


def _extract_rollup(prop: Dict[str, Any]) -> Any:
    """
    Extract a rollup property.

    Array rollups are extracted element by element, one level deep. Nested
    title items are read straight from their spans. Anything else falls back
    to the rollup's number.

    Args:
        prop: Notion rollup property

    Returns:
        List of extracted values, a number, or None
    """
    rollup = prop.get('rollup') or {}
    array = rollup.get('array')
    if isinstance(array, list):
        values = []
        for item in array:
            if item.get('type') == 'title':
                value = _join_plain_text(item.get('title'))
            else:
                value = extract_property_value(item)
            if value is not None:
                values.append(value)
        return values
    return rollup.get('number') or None


def _extract_formula(prop: Dict[str, Any]) -> Any:
    formula = prop.get('formula') or {}
    result_type = formula.get('type')
    if result_type == 'string':
        return formula.get('string') or None
    if result_type == 'number':
        return formula.get('number')
    if result_type == 'boolean':
        return formula.get('boolean')
    if result_type == 'date':
        return (formula.get('date') or {}).get('start') or None
    return None


def _extract_files(prop: Dict[str, Any]) -> List[Dict[str, Optional[str]]]:
    files = []
    for item in prop.get('files') or []:
        hosted = (item.get('file') or {}).get('url')
        external = (item.get('external') or {}).get('url')
        files.append({
            'name': item.get('name'),
            'url': hosted or external or None
        })
    return files


EXTRACTORS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    'title': _extract_title,
    'rich_text': _extract_rich_text,
    'number': _extract_number,
    'select': _extract_select,
    'multi_select': _extract_multi_select,
    'date': _extract_date,
    'checkbox': _extract_checkbox,
    'url': _extract_scalar('url'),
    'email': _extract_scalar('email'),
    'phone_number': _extract_scalar('phone_number'),
    'status': _extract_status,
    'relation': _extract_relation,
    'rollup': _extract_rollup,
    'formula': _extract_formula,
    'created_time': _extract_scalar('created_time'),
    'last_edited_time': _extract_scalar('last_edited_time'),
    'created_by': _extract_actor('created_by'),
    'last_edited_by': _extract_actor('last_edited_by'),
    'people': _extract_people,
    'files': _extract_files,
}


def extract_property_value(prop: Optional[Dict[str, Any]]) -> Any:
    """
    Extract a plain value from any Notion property type.

    Args:
        prop: Notion property object tagged with a 'type' key

    Returns:
        Scalar, list, or None. Unknown property types yield None.
    """
    if not prop or not prop.get('type'):
        return None

    prop_type = prop['type']
    extractor = EXTRACTORS.get(prop_type)
    if extractor is None:
        logger.warning(f"⚠️  Unknown property type: {prop_type}")
        return None

    return extractor(prop)
