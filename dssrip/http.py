"""HTTP transport shared by the archive client.

Transient failures (connection errors, 429 and 5xx answers) are retried here by
urllib3; nothing above this module retries.
"""

from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import Settings

ARCHIVE_HOSTS = ('deadseascrolls.org.il', 'ggpht.com')


def new_session(settings: Settings) -> requests.Session:
    retry = Retry(
        total=settings.retries,
        connect=settings.retries,
        read=settings.retries,
        status=settings.retries,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({'GET', 'HEAD'}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_maxsize=max(settings.workers, settings.probe_workers))
    s = requests.Session()
    s.mount('https://', adapter)
    s.mount('http://', adapter)
    s.headers['User-Agent'] = settings.user_agent
    return s


def _verify_for(url: str, settings: Settings) -> bool:
    if not settings.skip_tls_verify:
        return True
    host = urlparse(url).hostname or ''
    return not host.endswith(ARCHIVE_HOSTS)


def http_ok(session, url, settings: Settings, ok=(200,)):
    r = session.get(url, timeout=settings.timeout, verify=_verify_for(url, settings))
    if r.status_code not in ok:
        raise requests.HTTPError(f"{r.status_code} for {url}", response=r)
    return r


def http_head(session, url, settings: Settings):
    return session.head(url, timeout=settings.timeout, allow_redirects=True,
                        verify=_verify_for(url, settings))
