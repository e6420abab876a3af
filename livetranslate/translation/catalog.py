"""
지원 언어 / 도메인 시나리오 목록
"""

SUPPORTED_LANGUAGES = [
    {"code": "zh-Hant", "name": "繁體中文"},
    {"code": "zh-Hans", "name": "简体中文"},
    {"code": "en", "name": "English"},
    {"code": "ja", "name": "日本語"},
    {"code": "ko", "name": "한국어"},
    {"code": "es", "name": "Español"},
    {"code": "fr", "name": "Français"},
    {"code": "de", "name": "Deutsch"},
    {"code": "pt", "name": "Português"},
    {"code": "ru", "name": "Русский"},
    {"code": "ar", "name": "العربية"},
    {"code": "th", "name": "ไทย"},
    {"code": "vi", "name": "Tiếng Việt"},
]

# 번역 공급자에 category 힌트로 전달되는 도메인
SUPPORTED_SCENARIOS = [
    {"code": "general", "name": "一般對話"},
    {"code": "medical", "name": "醫療"},
    {"code": "legal", "name": "法律"},
    {"code": "business", "name": "商務"},
    {"code": "education", "name": "教育"},
    {"code": "technology", "name": "科技"},
    {"code": "finance", "name": "金融"},
]
