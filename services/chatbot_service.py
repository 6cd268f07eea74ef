"""Keyword chatbot for the Yannova website widget.

Detects an intent from a fixed keyword table, answers with a canned Dutch
response and offers follow-up suggestions. No language model is involved.
"""

import random
import re
import string
import time
from typing import Any, Dict, List, Optional, Tuple

import structlog

from models.chat import ChatAnalysis, ChatReply

logger = structlog.get_logger()


DEFAULT_INTENT = "algemeen"
INTENT_CONFIDENCE = 0.85

# Checked in order; the first intent with a matching keyword wins.
INTENT_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("offerte_aanvragen", ["offerte", "prijs", "kosten", "wat kost", "quote", "prijsopgave", "wat kosten"]),
    ("informatie_producten", ["ramen", "deuren", "kunststof", "aluminium", "hout", "glas", "isolatie", "materiaal"]),
    ("informatie_diensten", ["plaatsing", "montage", "installatie", "service", "onderhoud", "reparatie"]),
    ("contact", ["contact", "telefoon", "adres", "openingstijden", "bereikbaar", "waar gevonden"]),
    ("garantie", ["garantie", "verzekering", "service", "nazorg", "garantievoorwaarden"]),
    ("proces", ["hoe lang", "doorlooptijd", "stappen", "proces", "wanneer", "duur"]),
    ("technisch", ["afmetingen", "maten", "specificaties", "technische details", "u-waarde"]),
    ("afspraak_maken", ["afspraak", "bezoek", "inmeten", "advies", "langskomen", "afspraak inplannen"]),
]

INTENT_RESPONSES: Dict[str, str] = {
    "offerte_aanvragen": (
        "Ik begrijp dat u een offerte wilt aanvragen. Om u een zo nauwkeurig mogelijke "
        "prijsindicatie te geven, heb ik wat meer informatie nodig:\n\n"
        "**Benodigde informatie:**\n"
        "- Hoeveel ramen en/of deuren heeft u nodig?\n"
        "- Wat zijn de afmetingen (breedte x hoogte)?\n"
        "- Welk materiaal prefereert u (kunststof, aluminium, hout)?\n"
        "- Welk type glas (dubbelglas, HR++, triple glas)?\n\n"
        "**Direct contact voor offerte:**\n"
        "Bel: +32 (0)477 28 10 28\n"
        "Email: info@yannovabouw.ai\n\n"
        "Ik kan u ook een geautomatiseerde prijsindicatie geven als u de specificaties doorgeeft."
    ),
    "informatie_producten": (
        "Bij Yannova Bouw bieden we een ruim assortiment ramen en deuren van topkwaliteit:\n\n"
        "**Ramen:**\n"
        "- **Kunststof:** €300-800 per m² - Onderhoudsarm en energiezuinig\n"
        "- **Aluminium:** €500-1200 per m² - Modern en duurzaam\n"
        "- **Hout:** €400-1000 per m² - Klassiek en isolerend\n\n"
        "**Deuren:**\n"
        "- **Binnendeuren:** €200-600 per stuk\n"
        "- **Buitendeuren:** €500-2000 per stuk\n"
        "- **Schuifdeuren:** €1500-5000 per stuk\n\n"
        "**Glasopties:**\n"
        "- Dubbelglas (standaard) - U-waarde: 2.8\n"
        "- HR++ (hoog rendement) - U-waarde: 1.3\n"
        "- Triple glas (maximale isolatie) - U-waarde: 0.8\n\n"
        "Alle producten komen met 10 jaar garantie en professionele montage. "
        "Waar bent u specifiek naar op zoek?"
    ),
    "contact": (
        "U kunt Yannova Bouw op verschillende manieren bereiken:\n\n"
        "**Telefoon:** +32 (0)477 28 10 28\n"
        "**Email:** info@yannovabouw.ai\n"
        "**Adres:** Industrieweg 123, 1234 AB Amsterdam\n\n"
        "**Openingstijden:**\n"
        "- Maandag t/m Vrijdag: 8:00 - 18:00 uur\n"
        "- Zaterdag: 9:00 - 16:00 uur\n"
        "- Zondag: Gesloten\n\n"
        "**Snel contact nodig?** Ik kan een specialist laten terugbellen. Wat heeft uw voorkeur?"
    ),
    "garantie": (
        "Bij Yannova Bouw staan we voor kwaliteit en bieden we uitgebreide garantie:\n\n"
        "**Standaard garantie:**\n"
        "- 10 jaar op alle materialen en montage\n"
        "- Dekking van materiaal- en constructiefouten\n"
        "- Gratis reparatie of vervanging\n\n"
        "**Service:**\n"
        "- 24/7 servicedienst voor calamiteiten\n"
        "- Jaarlijkse onderhoudsbeurt beschikbaar\n"
        "- Snelle response tijd: binnen 48 uur\n\n"
        "**Verlengde garantie:**\n"
        "- 15 jaar mogelijk tegen meerprijs\n"
        "- Uitgebreide dekking inclusief slijtage"
    ),
    "proces": (
        "Het proces bij Yannova Bouw is transparant en efficiënt:\n\n"
        "**Stap 1: Kennismaking en advies** - gratis adviesgesprek en advies op maat\n"
        "**Stap 2: Inmeten en offerte** - inmeting ter plaatse, offerte binnen 3 dagen\n"
        "**Stap 3: Productie** - productie op maat (4-6 weken) met kwaliteitscontrole\n"
        "**Stap 4: Montage** - professionele montage (1-3 dagen) met nette afwerking\n"
        "**Stap 5: Oplevering en nazorg** - controle, garantiecertificaat en 10 jaar nazorg\n\n"
        "**Doorlooptijd:** 6-8 weken van bestelling tot oplevering"
    ),
}

DEFAULT_RESPONSE = (
    "Ik help u graag verder! Bij Yannova Bouw zijn we gespecialiseerd in ramen en deuren "
    "met 15+ jaar ervaring.\n\n"
    "Wat kan ik voor u betekenen? Ik kan u helpen met:\n"
    "- Offerte aanvragen\n"
    "- Productinformatie\n"
    "- Advies over materialen\n"
    "- Informatie over onze diensten\n"
    "- Afspraak inplannen\n\n"
    "Waar wilt u meer informatie over?"
)

INTENT_SUGGESTIONS: Dict[str, List[str]] = {
    "offerte_aanvragen": ["Direct offerte aanvragen", "Inmeten afspraak maken", "Showroom bezoeken"],
    "informatie_producten": ["Kunststof ramen", "Aluminium deuren", "HR++ glas"],
    "contact": ["Telefoonnummer", "Adres en route", "Afspraak maken"],
    "garantie": ["Garantievoorwaarden", "Service contract", "Onderhoudsbeurt"],
}

DEFAULT_SUGGESTIONS = ["Offerte aanvragen", "Product informatie", "Contact opnemen"]

POSITIVE_WORDS = ["goed", "mooi", "perfect", "geweldig", "top", "uitstekend", "tevreden"]
NEGATIVE_WORDS = ["slecht", "probleem", "fout", "niet goed", "teleurgesteld", "ontevreden"]
SENTIMENT_STEP = 0.1

PHONE_PATTERN = re.compile(r"(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
MEASUREMENT_PATTERN = re.compile(r"(\d+)\s*[xX×]\s*(\d+)")

SESSION_ID_PREFIX = "yannova"
_BASE36 = string.digits + string.ascii_lowercase


def detect_intent(message: str) -> str:
    """Return the first intent whose keywords occur in the message."""
    lower_message = message.lower()
    for intent, keywords in INTENT_KEYWORDS:
        if any(keyword in lower_message for keyword in keywords):
            return intent
    return DEFAULT_INTENT


def extract_entities(message: str) -> Dict[str, Any]:
    """Pull phone number, e-mail address and 'B x H' measurements from a message."""
    entities: Dict[str, Any] = {}

    phone_match = PHONE_PATTERN.search(message)
    if phone_match:
        entities["telefoon"] = phone_match.group(0)

    email_match = EMAIL_PATTERN.search(message)
    if email_match:
        entities["email"] = email_match.group(0)

    size_match = MEASUREMENT_PATTERN.search(message)
    if size_match:
        entities["afmetingen"] = {
            "breedte": int(size_match.group(1)),
            "hoogte": int(size_match.group(2)),
        }

    return entities


def calculate_sentiment(text: str) -> float:
    """Keyword sentiment score clamped to [-1, 1]."""
    lower_text = text.lower()
    score = 0.0
    for word in POSITIVE_WORDS:
        if word in lower_text:
            score += SENTIMENT_STEP
    for word in NEGATIVE_WORDS:
        if word in lower_text:
            score -= SENTIMENT_STEP
    return round(max(-1.0, min(1.0, score)), 2)


def generate_session_id(now_ms: Optional[int] = None) -> str:
    """New chat session id: yannova_<epoch ms>_<9 base36 chars>."""
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"{SESSION_ID_PREFIX}_{timestamp}_{suffix}"


def generate_reply(message: str) -> ChatReply:
    """Build the chatbot answer for a visitor message."""
    intent = detect_intent(message)

    reply = ChatReply(
        response=INTENT_RESPONSES.get(intent, DEFAULT_RESPONSE),
        analysis=ChatAnalysis(
            intent=intent,
            confidence=INTENT_CONFIDENCE,
            entities=extract_entities(message),
        ),
        suggestions=list(INTENT_SUGGESTIONS.get(intent, DEFAULT_SUGGESTIONS)),
        sentiment_score=calculate_sentiment(message),
    )

    logger.info(
        "chat_reply_generated",
        intent=intent,
        entity_keys=sorted(reply.analysis.entities.keys()),
        sentiment=reply.sentiment_score,
    )
    return reply
