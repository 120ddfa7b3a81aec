"""
Shared fixtures: small copies of the documentation page.

Both pages carry the three per-load artifacts the Sanitizer removes, with
placeholder tokens so tests can produce "the same page, loaded again".
"""

from datetime import datetime, timezone

import pytest

from apigen.change_gate import compute_digest
from apigen.extractor import Extractor
from apigen.sanitizer import Sanitizer
from apigen.schemas import AccessRecord

FOOTER_HTML = """\
<footer>
<ul>
<li><a href="/support/">Support</a></li>
<li><a href="/cdn-cgi/l/email-protection#__CONTACT_TOKEN__">Contact us</a></li>
</ul>
</footer>
<script data-cfasync="false" src="/cdn-cgi/scripts/5c5dd728/cloudflare-static/email-decode.min.js"></script><script>(function(){window['__CF$cv$params']={r:'__SCRIPT_TOKEN__',t:'MTcwMDAwMDAwMA=='};})();</script>
</body>
</html>
"""

FULL_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>API Documentation | Alpha Vantage</title>
<script src="/static/js/jquery.min.js"></script>
</head>
<body>
<div id="left">
<ul class="toc">
<li id="table-of-contents">Table of Contents</li>
<li><a href="#time-series-data">Core Stock APIs</a>
<ul>
<li><a href="#intraday">Intraday <span class="premium-label">Premium</span></a></li>
<li><a href="#latestprice">Quote Endpoint</a></li>
<li><a href="#market-status">Global Market Open &amp; Close Status</a></li>
</ul>
</li>
<li><a href="#alpha-intelligence">Alpha Intelligence&trade;</a>
<ul>
<li><a href="#news-sentiment">Market News &amp; Sentiment</a></li>
<li><a href="#market-status">Global Market Open &amp; Close Status</a></li>
</ul>
</li>
<li><a href="#fundamentals">Fundamental Data</a>
<ul>
<li><a href="#company-overview">Company Overview</a></li>
</ul>
</li>
</ul>
</div>
<div id="right">
<h2 id="time-series-data">Core Stock APIs</h2>
<p>This suite of APIs provide global equity data in 4 different temporal resolutions.</p>
<br>
<h4 id="intraday">Intraday <span class="premium-label">Premium</span></h4>
<br>
<p>This API returns current and 20+ years of historical intraday OHLCV time series.</p>
<p>Tip: the intraday data is derived from the Securities Information Processor.</p>
<br>
<h6><b>API Parameters</b></h6>
<p><b>❚ Required: <code>function</code></b></p>
<p>The time series of your choice. In this case, <code>function=TIME_SERIES_INTRADAY</code></p>
<p><b>❚ Required: <code>symbol</code></b></p>
<p>The name of the equity of your choice. For example: <code>symbol=IBM</code></p>
<p><b>❚ Required: <code>interval</code></b></p>
<p>Time interval between two consecutive data points in the time series.</p>
<p>❚ Optional: <code>outputsize</code></p>
<p>By default, <code>outputsize=compact</code>.</p>
<p>Strings <code>compact</code> and <code>full</code> are accepted.</p>
<p><b>❚ Required: <code>apikey</code></b></p>
<p>Your API key. Claim your free API key <a href="https://www.alphavantage.co/support/#api-key" target="_blank">here</a>.</p>
<br>
<p><b>Examples</b> (click for JSON output)</p>
<br>
<h4 id="latestprice">Quote Endpoint</h4>
<p>A lightweight alternative to the time series APIs.</p>
<br>
<h6><b>API Parameters</b></h6>
<p><b>❚ Required: <code>function</code></b></p>
<p>The API function of your choice.</p>
<p><b>❚ Required: <code>symbol</code></b></p>
<p>The symbol of the global ticker of your choice. For example: <code>symbol=IBM</code>.</p>
<p><b>❚ Required: <code>apikey</code></b></p>
<p>Your API key for the quote endpoint.</p>
<br>
<h4 id="market-status">Global Market Open &amp; Close Status</h4>
<p>This endpoint returns the current market status of major trading venues.</p>
<br>
<h6><b>API Parameters</b></h6>
<p><b>❚ Required: <code>function</code></b></p>
<p>The API function of your choice. In this case, <code>function=MARKET_STATUS</code></p>
<p><b>❚ Required: <code>apikey</code></b></p>
<p>Your API key.</p>
<br>
<h2 id="alpha-intelligence">Alpha Intelligence&trade;</h2>
<p>The APIs in this section contain advanced market intelligence built with our AI partners.</p>
<br>
<h4 id="news-sentiment">Market News &amp; Sentiment</h4>
<p>This API returns live and historical market news &amp; sentiment data.</p>
<br>
<h6><b>API Parameters</b></h6>
<p><b>❚ Required: <code>function</code></b></p>
<p>The function of your choice. In this case, <code>function=NEWS_SENTIMENT</code></p>
<p>❚ Optional: <code>tickers</code></p>
<p>The stock/crypto/forex symbols of your choice.</p>
<p>❚ Optional: <code>limit</code></p>
<p>By default, <code>limit=50</code>. Questions? <a href="/cdn-cgi/l/email-protection" class="__cf_email__" data-cfemail="__EMAIL_TOKEN__">[email&#160;protected]</a></p>
<p><b>❚ Required: <code>apikey</code></b></p>
<p>Your API key.</p>
<br>
<h2 id="fundamentals">Fundamental Data</h2>
<p>We offer the following set of fundamental data APIs.</p>
<br>
<h4 id="company-overview">Company Overview</h4>
<p>This API returns the company information, financial ratios, and other key metrics.</p>
<br>
<h6><b>API Parameters</b></h6>
<p><b>❚ Required: <code>function</code></b></p>
<p>The function of your choice. In this case, <code>function=OVERVIEW</code></p>
<p><b>❚ Required: <code>symbol</code></b></p>
<p>The symbol of the token of your choice. For example: <code>symbol=IBM</code>.</p>
<p><b>❚ Required: <code>apikey</code></b></p>
<p>Your API key.</p>
<br>
</div>
""" + FOOTER_HTML

# Category A (fundamentals): one endpoint with required parameters only.
# Category B (forex): one endpoint with a required and an optional parameter.
# Listed B-after-A in the page; "forex" sorts first.
MINIMAL_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>API Documentation | Alpha Vantage</title>
</head>
<body>
<ul>
<li id="table-of-contents">Table of Contents</li>
<li><a href="#fundamentals">Fundamental Data</a>
<ul>
<li><a href="#company-overview">Company Overview</a></li>
</ul>
</li>
<li><a href="#forex">Foreign Exchange Rates (FX)</a>
<ul>
<li><a href="#fx-daily">FX Daily</a></li>
</ul>
</li>
</ul>
<h2 id="fundamentals">Fundamental Data</h2>
<p>We offer the following set of fundamental data APIs.</p>
<h4 id="company-overview">Company Overview</h4>
<p>This API returns the company information.</p>
<h6><b>API Parameters</b></h6>
<p><b>❚ Required: <code>function</code></b></p>
<p>The function of your choice. In this case, <code>function=OVERVIEW</code></p>
<p><b>❚ Required: <code>symbol</code></b></p>
<p>The symbol of the token of your choice.</p>
<p><b>❚ Required: <code>apikey</code></b></p>
<p>Your API key.</p>
<br>
<h2 id="forex">Foreign Exchange Rates (FX)</h2>
<p>APIs under this section provide a wide range of data feed for realtime and historical forex rates.</p>
<h4 id="fx-daily">FX Daily</h4>
<p>This API returns the daily time series of the FX currency pair specified.</p>
<h6><b>API Parameters</b></h6>
<p><b>❚ Required: <code>function</code></b></p>
<p>The time series of your choice. In this case, <code>function=FX_DAILY</code></p>
<p><b>❚ Required: <code>from_symbol</code></b></p>
<p>A three-letter symbol from the forex currency list.</p>
<p>❚ Optional: <code>outputsize</code></p>
<p>By default, <code>outputsize=compact</code>. Contact <a href="/cdn-cgi/l/email-protection" class="__cf_email__" data-cfemail="__EMAIL_TOKEN__">[email&#160;protected]</a></p>
<p><b>❚ Required: <code>apikey</code></b></p>
<p>Your API key.</p>
<br>
""" + FOOTER_HTML


def build_page(template: str, email_token: str = "b3c0c6c3c3dcc1c7f3d2dfc3",
               contact_token: str = "295a5c5959465b5d6948",
               script_token: str = "8a1f2e3d4c5b6a79") -> bytes:
    """Fill a page template's per-load tokens and encode it like the server does."""
    page = (template
            .replace("__EMAIL_TOKEN__", email_token)
            .replace("__CONTACT_TOKEN__", contact_token)
            .replace("__SCRIPT_TOKEN__", script_token))
    return page.encode("utf-8")


def reload_page(template: str) -> bytes:
    """The same page as build_page() would give, with different per-load tokens."""
    return build_page(template, email_token="d1e2f3a4b5c6d7e8f9a0b1c2",
                      contact_token="7f6e5d4c3b2a19080706",
                      script_token="0f1e2d3c4b5a6978")


@pytest.fixture
def full_page() -> bytes:
    return build_page(FULL_PAGE)


@pytest.fixture
def minimal_page() -> bytes:
    return build_page(MINIMAL_PAGE)


@pytest.fixture
def full_catalog(full_page):
    return Extractor().extract(Sanitizer().sanitize(full_page))


@pytest.fixture
def access_record(full_page) -> AccessRecord:
    return AccessRecord(
        timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        digest=compute_digest(Sanitizer().sanitize(full_page)),
    )
