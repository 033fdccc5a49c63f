"""Sites under test, their page slugs, and the browser profiles they run in."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .spreadsheets import sanitize_name

RECAPTCHA_EXCLUDES = (
    'iframe[title="reCAPTCHA"]',
    ".rc-anchor-normal-footer > .rc-anchor-pt > a:nth-child(1)",
)


@dataclass(frozen=True)
class BrowserProfile:
    """A Chrome configuration pages are scanned in."""

    name: str
    mobile_device: Optional[str] = None

    @property
    def is_mobile(self) -> bool:
        return self.mobile_device is not None


GOOGLE_CHROME = BrowserProfile(name="Google Chrome")
MOBILE_CHROME = BrowserProfile(name="Mobile Chrome", mobile_device="Pixel 5")
DEFAULT_PROFILES: Tuple[BrowserProfile, ...] = (MOBILE_CHROME, GOOGLE_CHROME)


@dataclass(frozen=True)
class SiteConfig:
    """Base URL, page slugs and axe configuration of one site."""

    name: str
    base_url: str
    slugs: Sequence[str]
    exclude: Sequence[str] = ()
    disabled_rules: Sequence[str] = ()
    filename_overrides: Dict[str, str] = field(default_factory=dict)

    def url_for(self, slug: str) -> str:
        return f"{self.base_url}/{slug}"

    def result_name(self, slug: str, profile: Optional[BrowserProfile] = None) -> str:
        """File stem for a page's results, e.g. ``case_studies_cnbc__Mobile_Chrome``."""
        stem = self.filename_overrides.get(slug, slug) or "home"
        if profile is not None:
            stem = f"{stem}_{profile.name}"
        return sanitize_name(stem)


TFG = SiteConfig(
    name="tfg",
    base_url="https://thefranchisegroup.com",
    slugs=(
        "",
        "links/",
        "case-studies/national-park-service/",
        "case-studies/",
        "case-studies/allianz-trade/",
        "full-service-agency-services-business-growth/",
        "studio/",
        "careers/",
        "case-studies/the-west-coast-studio-buildout/",
        "case-studies/buttonwood-park-zoo/",
        "studio/ron-lussier/",
        "useful-event-production-services/",
        "studio/sean-anderson/",
        "video/",
        "contact/",
        "case-studies/new-bedford-ocean-cluster/",
        "case-studies/1111-the-practice/",
        "case-studies/zeal-technology/",
        "case-studies/baycoast-bank/",
        "cannabis/",
        "tfg-agency-podcast/",
        "case-studies/poyant-signs/",
        "case-studies/care-free-homes-inc/",
        "case-studies/hitachi-vantara-2/",
        "reviews/",
        "case-studies/buy-black-nb/",
        "studio/serena-cabido/",
        "studio/justin-hebert/",
        "studio/sarah-harding/",
        "studio/tracy-deescobar/",
        "workwithus/",
        "case-studies/cnbc/",
        "case-studies/long-built-homes/",
        "case-studies/donna-harris-richards/",
        "case-studies/hitachi-vantara/",
        "studio/victoria-thomas/",
        "studio/teresina-francis/",
        "studio/nicholas-francis/",
        "studio/courtney-raymond/",
        "marketing/",
        "virtual-events/",
        "insights/",
        "case-studies/yamaha-music-usa/",
        "case-studies/clearplan/",
        "case-studies/international-data-group/",
        "case-studies/access-biologicals/",
    ),
)

# Local development server; the most permissive rule set.
ADA = SiteConfig(
    name="ada",
    base_url="http://192.168.1.17:8001",
    slugs=(
        "",
        "case-studies",
        "contact",
        "full-service-agency-services-business-growth",
        "studio",
        "insights",
        "tfg-agency-podcast",
        "careers",
    ),
    exclude=RECAPTCHA_EXCLUDES,
    disabled_rules=(
        "landmark-one-main",
        "heading-order",
        "select-name",
        "aria-allowed-role",
        "landmark-unique",
        "region",
        "color-contrast",
        "link-name",
        "landmark-no-duplicate-banner",
        "page-has-heading-one",
        "link-in-text-block",
    ),
)

AT_SCALE = SiteConfig(
    name="at-scale",
    base_url="https://atscaleconference.com",
    slugs=(
        "news-ideas/",
        "speaker-submissions",
        "events/scale-networking",
        "events/scale-systems-reliability",
    ),
    exclude=RECAPTCHA_EXCLUDES,
)

PIEZONIS = SiteConfig(
    name="piezonis",
    base_url="https://piezonis.com",
    slugs=(
        "",
        "loc/warwick-pizza/",
        "loc/catering-inquiry",
    ),
    exclude=('iframe[title="reCAPTCHA"]', ".rc-anchor-pt", ".rc-anchor-normal-footer"),
    filename_overrides={
        "loc/warwick-pizza/": "warwick-pizza",
        "loc/catering-inquiry": "catering-inquiry",
    },
)

SITES: Dict[str, SiteConfig] = {site.name: site for site in (TFG, ADA, AT_SCALE, PIEZONIS)}


def get_site(name: str) -> SiteConfig:
    try:
        return SITES[name]
    except KeyError:
        known = ", ".join(sorted(SITES))
        raise KeyError(f"Unknown site '{name}'. Known sites: {known}") from None


def get_profiles(names: Optional[Sequence[str]] = None) -> List[BrowserProfile]:
    """Resolve profile names; ``None`` or empty means every default profile."""
    if not names:
        return list(DEFAULT_PROFILES)
    by_name = {profile.name.lower(): profile for profile in DEFAULT_PROFILES}
    profiles = []
    for name in names:
        profile = by_name.get(name.lower())
        if profile is None:
            known = ", ".join(p.name for p in DEFAULT_PROFILES)
            raise KeyError(f"Unknown browser '{name}'. Known browsers: {known}")
        profiles.append(profile)
    return profiles
