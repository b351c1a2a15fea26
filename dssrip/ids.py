import re
from dataclasses import dataclass

from .errors import InvalidInput

PAGE_URL_TEMPLATE = 'https://www.deadseascrolls.org.il/explore-the-archive/image/{}'

_ID_RE = re.compile(r'^[A-Za-z]+-\d+$')
# trailing segment after .../explore-the-archive/image/, optional slash, query, fragment
_PAGE_RE = re.compile(r'/explore-the-archive/image/(?P<id>[^/?#]+)/?(?:[?#].*)?$')


@dataclass(frozen=True)
class ItemId:
    """Archive item identifier such as ``B-314643``."""
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not _ID_RE.match(self.value):
            raise InvalidInput(f"Not an archive item id: {self.value!r}")
        object.__setattr__(self, 'value', self.value.upper())

    def __str__(self):
        return self.value

    @property
    def page_url(self) -> str:
        return PAGE_URL_TEMPLATE.format(self.value)


def resolve(text: str) -> ItemId:
    """Turn an item page URL or a bare id into an ItemId.

    Example: ``https://www.deadseascrolls.org.il/explore-the-archive/image/B-314643``
    and ``B-314643`` both give ``ItemId('B-314643')``.
    """
    text = (text or '').strip()
    if '/' in text:
        m = _PAGE_RE.search(text)
        if not m:
            raise InvalidInput(f"Cannot find an item id in URL: {text}")
        text = m.group('id')
    return ItemId(text)
