"""
Shopbot - Prompt Templates & Domain Vocabulary
================================================
Centralised prompt management and keyword tables for the chat
pipeline.  All prompts live here so they can be versioned, reviewed,
and tuned independently of application logic.

Exports
-------
STRICT_SYSTEM_TEMPLATE, GENERAL_SYSTEM_TEMPLATE, ANSWER_ENVELOPE_INSTRUCTION,
NO_INFO_RESPONSES, LANGUAGE_NAMES,
TOPIC_TOKENS, BOOSTER_TOKENS, SECTION_SHORTCUT_TOPICS, SYNONYMS,
SPANISH_STOPWORDS, ITALIAN_STOPWORDS.
"""

# ══════════════════════════════════════════════════════════════════════
#  CANONICAL DOMAIN TOKENS
# ══════════════════════════════════════════════════════════════════════
# Every synonym below folds into one of these.  A query that folds to
# any of them is answered in strict (context-only) mode.

TOPIC_TOKENS: frozenset[str] = frozenset({"hours", "menu", "price", "promotion", "booking", "address", "contact"})

# High-value keywords that earn a scoring bonus in lexical retrieval.
BOOSTER_TOKENS: frozenset[str] = frozenset(TOPIC_TOKENS | {"line", "facebook", "phone", "open", "close"})

# Topics whose whole section is returned verbatim when a heading matches.
# Order is the tie-break when a query mentions several of them.
SECTION_SHORTCUT_TOPICS: tuple[str, ...] = ("menu", "price", "promotion", "hours")


# ══════════════════════════════════════════════════════════════════════
#  SYNONYM TABLE — term → canonical token
# ══════════════════════════════════════════════════════════════════════
# ASCII single words match whole tokens; everything else (Thai, CJK,
# accented or multi-word terms) matches as a substring because those
# scripts are not space-delimited.

SYNONYMS: dict[str, str] = {
    # ── hours ──
    "hour": "hours", "hours": "hours", "open": "hours", "opening": "hours", "close": "hours", "closing": "hours", "closed": "hours", "time": "hours", "when": "hours",
    "เวลา": "hours", "เปิด": "hours", "ปิด": "hours", "กี่โมง": "hours",
    "営業時間": "hours", "何時": "hours", "開店": "hours", "閉店": "hours",
    "营业时间": "hours", "几点": "hours", "開門": "hours", "开门": "hours",
    "영업시간": "hours", "몇 시": "hours",
    "horario": "hours", "abierto": "hours", "abren": "hours", "cierran": "hours",
    "orari": "hours", "orario": "hours", "aperto": "hours", "chiuso": "hours",
    # ── menu ──
    "menu": "menu", "food": "menu", "dish": "menu", "dishes": "menu", "drink": "menu", "drinks": "menu",
    "เมนู": "menu", "อาหาร": "menu", "เครื่องดื่ม": "menu",
    "メニュー": "menu", "料理": "menu",
    "菜单": "menu", "菜單": "menu",
    "메뉴": "menu", "음식": "menu",
    "menú": "menu", "comida": "menu", "platos": "menu",
    "piatti": "menu", "cibo": "menu",
    # ── price ──
    "price": "price", "prices": "price", "cost": "price", "how much": "price", "baht": "price",
    "ราคา": "price", "บาท": "price", "เท่าไหร่": "price", "เท่าไร": "price",
    "値段": "price", "価格": "price", "いくら": "price",
    "价格": "price", "價格": "price", "多少钱": "price",
    "가격": "price", "얼마": "price",
    "precio": "price", "precios": "price", "cuánto": "price", "cuanto": "price",
    "prezzo": "price", "prezzi": "price", "quanto costa": "price",
    # ── promotion ──
    "promotion": "promotion", "promo": "promotion", "discount": "promotion", "deal": "promotion", "offer": "promotion",
    "โปรโมชั่น": "promotion", "โปร": "promotion", "ส่วนลด": "promotion",
    "キャンペーン": "promotion", "割引": "promotion",
    "优惠": "promotion", "折扣": "promotion",
    "할인": "promotion", "프로모션": "promotion",
    "promoción": "promotion", "descuento": "promotion", "oferta": "promotion",
    "promozione": "promotion", "sconto": "promotion", "offerta": "promotion",
    # ── booking ──
    "booking": "booking", "book": "booking", "reservation": "booking", "reserve": "booking", "table": "booking",
    "จอง": "booking", "โต๊ะ": "booking",
    "予約": "booking",
    "预订": "booking", "預訂": "booking", "订位": "booking",
    "예약": "booking",
    "reserva": "booking", "reservar": "booking", "reservación": "booking",
    "prenotazione": "booking", "prenotare": "booking",
    # ── address ──
    "address": "address", "location": "address", "where": "address", "map": "address", "directions": "address",
    "ที่อยู่": "address", "อยู่ที่ไหน": "address", "แผนที่": "address", "ที่ตั้ง": "address",
    "住所": "address", "場所": "address",
    "地址": "address", "位置": "address",
    "주소": "address", "위치": "address",
    "dirección": "address", "ubicación": "address", "dónde": "address", "donde": "address",
    "indirizzo": "address", "dove": "address",
    # ── contact ──
    "contact": "contact", "phone": "contact", "call": "contact", "tel": "contact", "line": "contact", "facebook": "contact", "fb": "contact",
    "ติดต่อ": "contact", "โทร": "contact", "เบอร์": "contact", "ไลน์": "contact", "เฟส": "contact",
    "連絡": "contact", "電話": "contact",
    "联系": "contact", "电话": "contact",
    "연락": "contact", "전화": "contact",
    "contacto": "contact", "teléfono": "contact", "telefono": "contact",
    "contatto": "contact", "contatti": "contact",
}


# ══════════════════════════════════════════════════════════════════════
#  LANGUAGE DETECTION STOPWORDS
# ══════════════════════════════════════════════════════════════════════

SPANISH_STOPWORDS: frozenset[str] = frozenset({"el", "las", "hola", "gracias", "qué", "que", "cuánto", "cuanto", "dónde", "donde", "está", "están", "tienen", "quiero", "para", "por", "favor", "una", "buenos", "días", "horario", "precio", "reservar", "usted", "ustedes"})

ITALIAN_STOPWORDS: frozenset[str] = frozenset({"il", "gli", "che", "ciao", "grazie", "quanto", "sono", "avete", "vorrei", "della", "delle", "questo", "buongiorno", "buonasera", "orari", "prezzo", "prenotare", "perché", "anche", "molto", "è"})


# ══════════════════════════════════════════════════════════════════════
#  LANGUAGE NAMES (used inside prompts)
# ══════════════════════════════════════════════════════════════════════

LANGUAGE_NAMES: dict[str, str] = {
    "th": "Thai",
    "ja": "Japanese",
    "zh": "Chinese",
    "ko": "Korean",
    "es": "Spanish",
    "it": "Italian",
    "en": "English",
}


# ══════════════════════════════════════════════════════════════════════
#  NO-INFORMATION FALLBACK
# ══════════════════════════════════════════════════════════════════════

NO_INFO_RESPONSES: dict[str, str] = {
    "th": "ไม่มีข้อมูลในระบบ กรุณาติดต่อร้าน (โทร/LINE/FB)",
    "ja": "システムに情報がありません。お店に直接お問い合わせください（電話/LINE/FB）。",
    "zh": "系统中没有相关信息，请直接联系店家（电话/LINE/FB）。",
    "ko": "시스템에 정보가 없습니다. 가게에 직접 문의해 주세요 (전화/LINE/FB).",
    "es": "No hay información en el sistema. Por favor, contacte con el local (teléfono/LINE/FB).",
    "it": "Nessuna informazione nel sistema. Si prega di contattare il locale (telefono/LINE/FB).",
    "en": "No information available in the system. Please contact the shop (phone/LINE/FB).",
}


# ══════════════════════════════════════════════════════════════════════
#  STRUCTURED-ANSWER ENVELOPE
# ══════════════════════════════════════════════════════════════════════

ANSWER_ENVELOPE_INSTRUCTION: str = """═══ OUTPUT FORMAT ═══
Reply with ONE JSON object and nothing else — no markdown, no code fences.
• If you can answer: {"answer": "<your reply>"}
• If the answer is not available: {"no_answer": true}"""


# ══════════════════════════════════════════════════════════════════════
#  STRICT MODE — context-only answering
# ══════════════════════════════════════════════════════════════════════

STRICT_SYSTEM_TEMPLATE: str = """You are the chat assistant of {shop_name}.

═══ CORE RULES — ZERO HALLUCINATION ═══
1. Answer ONLY from the CONTEXT below. Never guess or add facts.
2. If the CONTEXT does not contain the fact, reply with {{"no_answer": true}}
   or politely suggest contacting the shop{contact_hint}.
3. Keep the reply to at most two sentences.

═══ LANGUAGE ═══
• The customer wrote in {language_name}. Reply in {language_name} only.
• Translate facts from the CONTEXT into {language_name}, but keep names,
  times, prices and numbers exactly as written.
• Never mix languages in one reply.
• Customer message sample (mirror its language): \"\"\"{message_sample}\"\"\"

═══ CONTEXT ═══
{context}

{envelope}"""


# ══════════════════════════════════════════════════════════════════════
#  GENERAL MODE — open answers, no invented shop facts
# ══════════════════════════════════════════════════════════════════════

GENERAL_SYSTEM_TEMPLATE: str = """You are the friendly chat assistant of {shop_name}.

═══ RULES ═══
1. You may answer general questions freely and briefly.
2. NEVER invent shop-specific facts (opening hours, menu items, prices,
   promotions, address, contact details). Only state such facts when they
   appear in the SHOP INFORMATION below; otherwise suggest contacting
   the shop{contact_hint}.

═══ LANGUAGE ═══
• The customer wrote in {language_name}. Reply in {language_name} only.
• Never mix languages in one reply.
• Customer message sample (mirror its language): \"\"\"{message_sample}\"\"\"

═══ SHOP INFORMATION ═══
{context}

{envelope}"""
