from typing import Callable, Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple, TypeVar

import bs4
from bs4 import BeautifulSoup
from lxml import etree

T = TypeVar('T')
E = TypeVar('E')


class MalformedXmlError(ValueError):
    """Raised when an uploaded document is not well-formed XML"""
    pass


class ParsedElement(NamedTuple):
    """
    Immutable XML node keyed by local name.

    An element holds either `text` (leaf) or `children` (element content);
    children are always a tuple, so repeated and single siblings look the same.
    """
    tag: str
    attrs: Dict[str, str]
    text: Optional[str]
    children: Tuple['ParsedElement', ...]

    def get(self, attr: str, default: Optional[str] = None) -> Optional[str]:
        return self.attrs.get(attr, default)

    def find_all(self, tag: str) -> List['ParsedElement']:
        """Direct children with the given local name"""
        return [child for child in self.children if child.tag == tag]

    def find(self, tag: str) -> Optional['ParsedElement']:
        for child in self.children:
            if child.tag == tag:
                return child
        return None

    def iter(self, tag: Optional[str] = None) -> Iterator['ParsedElement']:
        """Depth-first walk over self and all descendants, document order"""
        if tag is None or self.tag == tag:
            yield self
        for child in self.children:
            yield from child.iter(tag)

    def find_path(self, *tags: str) -> List['ParsedElement']:
        """
        Follow a child path, e.g. find_path('titles', 'title')
        :param tags:
        :return:
        """
        current = [self]
        for tag in tags:
            current = [match for el in current for match in el.find_all(tag)]
        return current

    def string_value(self) -> Optional[str]:
        """
        Trimmed text of the element, or the space-joined text of its children.
        Empty content is None.
        """
        if not self.children:
            text = (self.text or '').strip()
            return text if text else None
        parts = [part for part in (child.string_value() for child in self.children) if part is not None]
        if parts:
            return ' '.join(parts).strip()
        return None


def _local_name(name: str) -> str:
    return name.split(':')[-1]


def element_from_soup(tag: bs4.element.Tag) -> ParsedElement:
    """
    Convert a soup tag into a ParsedElement.  Namespace prefixes are dropped
    from tag and attribute names.
    :param tag:
    :return:
    """
    children = tuple(
        element_from_soup(child) for child in tag.children
        if isinstance(child, bs4.element.Tag)
    )
    attrs = {}
    for key, value in tag.attrs.items():
        if isinstance(value, list):
            value = ' '.join(value)
        attrs[_local_name(key)] = value
    return ParsedElement(
        tag=_local_name(tag.name),
        attrs=attrs,
        text=None if children else tag.get_text(),
        children=children
    )


def soup_from_bytes(stream: bytes) -> BeautifulSoup:
    """
    Read XML bytes into soup after a strict well-formedness check; the soup
    builder itself recovers from broken markup and would hide the error.
    :param stream:
    :return:
    """
    if isinstance(stream, str):
        stream = stream.encode('utf-8')
    if not stream or not stream.strip():
        raise MalformedXmlError('Empty XML document')
    try:
        etree.fromstring(stream, parser=etree.XMLParser(resolve_entities=False, no_network=True))
    except etree.XMLSyntaxError as e:
        raise MalformedXmlError(f'XML is not well-formed: {e}') from e
    return BeautifulSoup(stream, 'xml')


def parse_datacite_xml(stream: bytes) -> ParsedElement:
    """
    Parse XML bytes into a ParsedElement tree rooted at the document element
    :param stream:
    :return:
    """
    soup = soup_from_bytes(stream)
    root = next((child for child in soup.children if isinstance(child, bs4.element.Tag)), None)
    if root is None:
        raise MalformedXmlError('XML document has no root element')
    return element_from_soup(root)


def find_resource_element(root: ParsedElement) -> ParsedElement:
    """
    DataCite <resource> may be the document root or wrapped, e.g. in an
    OAI-PMH envelope.  Falls back to the root when there is none.
    """
    return next(root.iter('resource'), root)


def collect_parsed(parse_fn: Callable[[E], Optional[T]], elements: Iterable[E]) -> List[T]:
    """Apply an element parser and keep only the entries it could parse"""
    return [parsed for parsed in (parse_fn(el) for el in elements) if parsed is not None]
