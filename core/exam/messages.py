"""Localized pipeline messages (step labels and failure messages)."""

from typing import Dict

DEFAULT_LOCALE = "en"

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "exam_processing_started": "Exam processing started",
        "exam_processing_failed": "Failed to start exam processing",
        "exam_not_found": "Exam not found",
        "invalid_exam_data": "Invalid exam data",
        "csv_file_not_found": "CSV mapping file not found",
        "csv_file_read_error": "Error reading CSV mapping file",
        "job_not_found": "Job not found",
        "validation_error": "Validation error",
        "server_error": "Internal server error",
        "step_starting": "Starting exam processing...",
        "step_validating_exam": "Validating exam...",
        "step_parsing_answers": "Parsing exam answers...",
        "step_loading_calculation_data": "Loading calculation data...",
        "step_calculating_compatibility": "Calculating job compatibility...",
        "step_getting_ai_recommendations": "Getting AI recommendations...",
        "step_processing_ai_response": "Processing AI response...",
        "step_finalizing_results": "Finalizing results...",
    },
    "ar": {
        "exam_processing_started": "بدأت معالجة الامتحان",
        "exam_processing_failed": "فشل بدء معالجة الامتحان",
        "exam_not_found": "الامتحان غير موجود",
        "invalid_exam_data": "بيانات الامتحان غير صالحة",
        "csv_file_not_found": "ملف CSV للخريطة غير موجود",
        "csv_file_read_error": "خطأ في قراءة ملف CSV للخريطة",
        "job_not_found": "المهمة غير موجودة",
        "validation_error": "خطأ في التحقق",
        "server_error": "خطأ داخلي في الخادم",
        "step_starting": "جارٍ بدء معالجة الامتحان...",
        "step_validating_exam": "جارٍ التحقق من الامتحان...",
        "step_parsing_answers": "جارٍ تحليل إجابات الامتحان...",
        "step_loading_calculation_data": "جارٍ تحميل بيانات الحساب...",
        "step_calculating_compatibility": "جارٍ حساب التوافق الوظيفي...",
        "step_getting_ai_recommendations": "جارٍ الحصول على توصيات الذكاء الاصطناعي...",
        "step_processing_ai_response": "جارٍ معالجة استجابة الذكاء الاصطناعي...",
        "step_finalizing_results": "جارٍ إنهاء النتائج...",
    },
}


def translate(key: str, locale: str = DEFAULT_LOCALE) -> str:
    """Look up a message for the given locale, falling back to English, then the key."""
    table = MESSAGES.get(locale) or MESSAGES[DEFAULT_LOCALE]
    return table.get(key) or MESSAGES[DEFAULT_LOCALE].get(key, key)


def normalize_locale(locale: str, supported=("en", "ar"), default: str = DEFAULT_LOCALE) -> str:
    """Reduce an Accept-Language style value ("ar-EG,ar;q=0.9") to a supported locale."""
    if not locale:
        return default
    primary = locale.split(",")[0].split(";")[0].strip().lower()
    primary = primary.split("-")[0].split("_")[0]
    return primary if primary in supported else default
