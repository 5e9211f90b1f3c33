"""Reference credibility data for external sources.

Scores are 0-100. Fact-checking organizations rank highest, followed by wire
services, academic and government sources, then major news outlets. The
tables are refreshed out-of-band; nothing in the engine writes to them.
"""

from typing import Dict, FrozenSet

CREDIBLE_DOMAINS: Dict[str, int] = {
    # Fact-checking organizations
    "snopes.com": 96,
    "factcheck.org": 96,
    "politifact.com": 95,
    "fullfact.org": 95,
    "chequeado.com": 94,
    "pagellapolitica.it": 94,
    "maldita.es": 94,
    "afp.com": 93,
    "cofacts.tw": 70,

    # Wire services and major news outlets
    "reuters.com": 92,
    "apnews.com": 92,
    "bbc.com": 95,
    "bbc.co.uk": 95,
    "nytimes.com": 93,
    "wsj.com": 93,
    "washingtonpost.com": 92,
    "ft.com": 91,
    "economist.com": 91,
    "theguardian.com": 90,
    "npr.org": 90,
    "propublica.org": 88,

    # Academic and research
    "stanford.edu": 94,
    "harvard.edu": 94,
    "mit.edu": 94,
    "cambridge.org": 94,
    "nature.com": 93,
    "science.org": 93,
    "arxiv.org": 90,

    # Government and official
    "gov.uk": 92,
    "gov.au": 92,
    "whitehouse.gov": 90,
    "cdc.gov": 93,
    "who.int": 92,
    "fda.gov": 91,
    "ncbi.nlm.nih.gov": 92,

    # Medical
    "mayoclinic.org": 88,
    "healthline.com": 85,
    "webmd.com": 82,
}

UNRELIABLE_DOMAINS: FrozenSet[str] = frozenset({
    "infowars.com",
    "naturalnews.com",
    "beforeitsnews.com",
    "worldnewsdailyreport.com",
    "yournewswire.com",
})

THROWAWAY_TLDS = ("xyz", "trade", "download", "stream", "click", "top", "loan")

URL_SHORTENERS = frozenset({"bit.ly", "tinyurl.com", "goo.gl", "t.co", "ow.ly", "buff.ly", "is.gd"})

UNRELIABLE_SCORE = 5
