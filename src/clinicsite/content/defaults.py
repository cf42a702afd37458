"""Default site content and the ensure-defaults normalization pass.

``DEFAULT_CONTENT`` is a read-only view created once at import time.
Anything that needs a mutable copy goes through :func:`default_content`,
which deep-copies, so no request can mutate another request's defaults.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

_EXPERTS: list[dict[str, Any]] = [
    {
        "name": "Dr. Sarah Chen",
        "title": "Chief Oncologist",
        "imageUrl": "",
        "bio": "25+ years specializing in precision oncology and immunotherapy.",
        "icon": "medical_services",
        "visible": True,
    },
    {
        "name": "Dr. Michael Torres",
        "title": "Radiation Specialist",
        "imageUrl": "",
        "bio": "Expert in advanced radiation therapy and treatment planning.",
        "icon": "radiology",
        "visible": True,
    },
    {
        "name": "Dr. Priya Patel",
        "title": "Genetic Counselor",
        "imageUrl": "",
        "bio": "Leading researcher in cancer genetics and hereditary screening.",
        "icon": "genetics",
        "visible": True,
    },
    {
        "name": "Dr. James Wilson",
        "title": "Surgical Oncologist",
        "imageUrl": "",
        "bio": "Pioneer in minimally invasive surgical techniques.",
        "icon": "surgical",
        "visible": True,
    },
]

_TESTIMONIALS: list[dict[str, Any]] = [
    {
        "quote": {
            "en": "The team explained every step clearly and supported my family throughout treatment.",
            "ar": "قام الفريق بشرح كل خطوة بوضوح وقدم دعماً مستمراً لي ولعائلتي طوال رحلة العلاج.",
        },
        "author": {"en": "Mariam A.", "ar": "مريم أ."},
        "role": {"en": "Breast cancer survivor", "ar": "متعافية من سرطان الثدي"},
        "visible": True,
    },
    {
        "quote": {
            "en": "I felt safe and respected from the first consultation. The doctors coordinated everything.",
            "ar": "شعرت بالأمان والاحترام منذ أول استشارة، وكان تنسيق الأطباء لكل التفاصيل ممتازاً.",
        },
        "author": {"en": "Ahmed K.", "ar": "أحمد ك."},
        "role": {"en": "Patient family member", "ar": "أحد أفراد أسرة مريض"},
        "visible": True,
    },
    {
        "quote": {
            "en": "Fast diagnosis, clear plan, and compassionate care made a difficult time manageable.",
            "ar": "سرعة التشخيص ووضوح الخطة والرعاية الإنسانية جعلت فترة صعبة أكثر قابلية للتحمل.",
        },
        "author": {"en": "Nour H.", "ar": "نور ح."},
        "role": {"en": "Lymphoma patient", "ar": "مريض ليمفوما"},
        "visible": True,
    },
]

_TEAM_SECTION = {
    "heading": "World-Class Specialists",
    "subheading": (
        "Our team combines decades of experience with cutting-edge research "
        "and compassionate care."
    ),
}

_TESTIMONIALS_SECTION = {
    "heading": {"en": "Patient Stories", "ar": "تجارب المرضى"},
    "subheading": {
        "en": "Real feedback from patients and families we have supported.",
        "ar": "آراء حقيقية من مرضى وعائلات تلقوا الرعاية لدينا.",
    },
}

_INSURANCE_BLURB = {
    "en": (
        "We work with a broad range of payers and will help you understand "
        "available coverage and payment options before treatment begins."
    ),
    "ar": "نتعاون مع عدد كبير من الجهات الممولة للرعاية الصحية ونساعدك على فهم خيارات التغطية والتكاليف قبل بدء العلاج.",
}
_INSURANCE_LINK_LABEL = {"en": "Check Your Coverage", "ar": "تحقق من التغطية"}
_INSURANCE_COVERAGE_LIST = {"en": "", "ar": ""}

_FORM_ROUTE = {"type": "none", "value": ""}

# Order used when an old document has no sectionsOrder at all.
LEGACY_SECTIONS_ORDER = ("hero", "services", "team", "testimonials", "about", "contact", "cta")

# Sections added after the first release; inserted right before "about".
INSERTED_SECTIONS = ("testimonials", "news", "updates", "articles")

_DEFAULT_CONTENT: dict[str, Any] = {
    "siteInfo": {
        "title": "Comprehensive Cancer Center",
        "tagline": "Science That Heals. Care That Connects.",
        "heroHeading": "Science That Heals. Care That Connects.",
        "heroSubheading": "Advanced Cancer Treatment",
        "heroDescription": "Where cutting-edge oncology meets personalized patient care.",
        "heroCtaPrimary": "Schedule a Consultation",
        "heroCtaSecondary": "Learn More",
    },
    "contact": {
        "phone": "01120800011",
        "address": "644 طريق الحرية، جناكلس، الإسكندرية",
        "email": "info@comprehensivecancercenter.com",
        "emergencyPhone": "03-5865843",
    },
    "stats": {
        "patientsServed": 5000,
        "successRate": 95,
        "specialists": 50,
        "yearsExperience": 20,
    },
    "sectionsOrder": [
        "hero", "services", "team", "testimonials", "news",
        "updates", "articles", "about", "contact", "cta",
    ],
    "sectionVisibility": {
        "hero": True, "services": True, "team": True, "testimonials": True,
        "news": True, "updates": True, "articles": True, "about": True,
        "contact": True, "cta": True,
    },
    "services": [
        {
            "icon": "science",
            "title": "Advanced Diagnostics",
            "description": "State-of-the-art imaging and molecular testing.",
        },
        {
            "icon": "medication",
            "title": "Precision Medicine",
            "description": "Targeted therapies tailored to your profile.",
        },
        {
            "icon": "support",
            "title": "Holistic Support",
            "description": "Nutrition, mental health, survivorship programs.",
        },
    ],
    "aboutSection": {
        "heading": "Leading Cancer Care",
        "highlightsHeading": "Why Choose Us",
        "paragraphs": [
            "At Comprehensive Cancer Center we address not just the disease, "
            "but the whole person."
        ],
        "highlights": [
            "Nationally recognized specialists",
            "Clinical trials",
            "Supportive care",
        ],
        "videoUrl": "https://www.facebook.com/reel/8113161795385494",
    },
    "footer": {
        "copyright": "© 2024 Comprehensive Cancer Center.",
        "hours": "Mon - Fri: 8:00 AM - 6:00 PM",
        "emergencyText": "24/7 Emergency Support",
    },
    "insurance": {
        "blurb": _INSURANCE_BLURB,
        "coverageLinkLabel": _INSURANCE_LINK_LABEL,
        "coverageList": _INSURANCE_COVERAGE_LIST,
    },
    "teamSection": _TEAM_SECTION,
    "testimonialsSection": _TESTIMONIALS_SECTION,
    "contactSection": {
        "heading": {
            "en": "Start a confidential conversation with our team",
            "ar": "ابدأ تواصلاً سريًا مع فريق الرعاية لدينا",
        },
        "subheading": {
            "en": (
                "Share a few details and our patient coordination team will call you "
                "back to discuss appointment options. This form is not for emergencies."
            ),
            "ar": "أخبرنا ببعض التفاصيل وسيتواصل معك فريق تنسيق المرضى لمناقشة مواعيد الزيارة. هذا النموذج غير مخصص للحالات الطارئة.",
        },
        "privacyNotice": {
            "en": (
                "Information sent through this form is reviewed by our clinical "
                "coordination team and kept confidential in line with applicable "
                "privacy standards. Please do not include full medical records or "
                "highly sensitive identifiers."
            ),
            "ar": "تتم مراجعة المعلومات الواردة في هذا النموذج من قبل فريق تنسيق الرعاية مع الحفاظ على سريتها وفق المعايير المعتمدة لحماية الخصوصية. برجاء عدم إرسال تقارير طبية كاملة أو بيانات تعريفية عالية الحساسية.",
        },
        "formRoute": _FORM_ROUTE,
    },
    "testimonials": _TESTIMONIALS[:1],
    "experts": _EXPERTS,
}

DEFAULT_CONTENT: Mapping[str, Any] = MappingProxyType(_DEFAULT_CONTENT)

CONTENT_KEYS = tuple(_DEFAULT_CONTENT)


def default_content() -> dict[str, Any]:
    """Return a fresh, mutable copy of the default document."""
    return copy.deepcopy(_DEFAULT_CONTENT)


def default_experts() -> list[dict[str, Any]]:
    return copy.deepcopy(_EXPERTS)


def default_testimonials() -> list[dict[str, Any]]:
    return copy.deepcopy(_TESTIMONIALS)


def _falsy(value: Any) -> bool:
    """Loose emptiness used by the on-disk format: None, False, 0 or ""."""
    if value is None or value is False or value == "":
        return True
    return isinstance(value, int | float) and not isinstance(value, bool) and value == 0


def _from_defaults(key: str) -> Callable[[], Any]:
    return lambda: copy.deepcopy(_DEFAULT_CONTENT[key])


# Default table for top-level keys: field → (is-missing test, default generator).
# Keys not listed here are handled by dedicated rules in ensure_defaults.
CONTENT_DEFAULTS: dict[str, tuple[Callable[[Any], bool], Callable[[], Any]]] = {
    "siteInfo": (_falsy, _from_defaults("siteInfo")),
    "contact": (_falsy, _from_defaults("contact")),
    "stats": (_falsy, _from_defaults("stats")),
    "services": (lambda v: not isinstance(v, list), _from_defaults("services")),
    "aboutSection": (_falsy, _from_defaults("aboutSection")),
    "footer": (_falsy, _from_defaults("footer")),
    "teamSection": (_falsy, lambda: copy.deepcopy(_TEAM_SECTION)),
    "testimonialsSection": (_falsy, lambda: copy.deepcopy(_TESTIMONIALS_SECTION)),
    "contactSection": (lambda v: not isinstance(v, dict), _from_defaults("contactSection")),
    "experts": (lambda v: not isinstance(v, list) or not v, default_experts),
    "testimonials": (lambda v: not isinstance(v, list) or not v, default_testimonials),
}


def _insert_before_about(order: list[Any], section_id: str) -> None:
    if section_id in order:
        return
    if "about" in order:
        order.insert(order.index("about"), section_id)
    else:
        order.append(section_id)


def ensure_defaults(content: Any) -> Any:
    """Backfill every ContentDocument field an older document may lack.

    Pure and idempotent: the input is never modified and
    ``ensure_defaults(ensure_defaults(x)) == ensure_defaults(x)``.
    Non-dict input is returned as an unmodified copy.
    """
    if not isinstance(content, dict):
        return copy.deepcopy(content)

    doc = copy.deepcopy(content)

    for key, (is_missing, make_default) in CONTENT_DEFAULTS.items():
        if is_missing(doc.get(key)):
            doc[key] = make_default()

    route = doc["contactSection"].get("formRoute")
    if not isinstance(route, dict):
        doc["contactSection"]["formRoute"] = copy.deepcopy(_FORM_ROUTE)

    if not isinstance(doc.get("sectionsOrder"), list):
        doc["sectionsOrder"] = list(LEGACY_SECTIONS_ORDER)
    for section_id in INSERTED_SECTIONS:
        _insert_before_about(doc["sectionsOrder"], section_id)

    if not isinstance(doc.get("sectionVisibility"), dict):
        doc["sectionVisibility"] = {}
    for section_id in INSERTED_SECTIONS:
        doc["sectionVisibility"].setdefault(section_id, True)

    if not isinstance(doc.get("insurance"), dict):
        doc["insurance"] = {}
    insurance = doc["insurance"]
    if _falsy(insurance.get("blurb")):
        insurance["blurb"] = copy.deepcopy(_INSURANCE_BLURB)
    if _falsy(insurance.get("coverageLinkLabel")):
        insurance["coverageLinkLabel"] = copy.deepcopy(_INSURANCE_LINK_LABEL)
    if _falsy(insurance.get("coverageList")):
        insurance["coverageList"] = copy.deepcopy(_INSURANCE_COVERAGE_LIST)

    return doc
