from typing import Dict

DEFAULT_LOCALE = "ru"

METHOD_NOT_ALLOWED = "Method not allowed"

MESSAGES: Dict[str, Dict[str, str]] = {
    "ru": {
        "required": "Все поля обязательны для заполнения",
        "invalid_email": "Некорректный формат email",
        "not_configured": "Сервер не настроен для отправки почты. Попробуйте позже.",
        "sent": "Сообщение успешно отправлено! Я свяжусь с вами в течение 24 часов.",
        "auth_failed": "Ошибка авторизации почтового сервера. Проверьте настройки email и пароля.",
        "connection_failed": "Не удалось подключиться к почтовому серверу.",
        "send_failed": "Произошла ошибка при отправке сообщения. Пожалуйста, попробуйте еще раз.",
    },
    "en": {
        "required": "All fields are required",
        "invalid_email": "Invalid email format",
        "not_configured": "The server is not configured to send mail. Please try again later.",
        "sent": "Message sent successfully! I will get back to you within 24 hours.",
        "auth_failed": "Mail server authorization error. Check the email and password settings.",
        "connection_failed": "Could not connect to the mail server.",
        "send_failed": "Something went wrong while sending your message. Please try again later.",
    },
}


def message_text(key: str, locale: str = DEFAULT_LOCALE) -> str:
    table = MESSAGES.get((locale or "").strip().lower(), MESSAGES[DEFAULT_LOCALE])
    return table[key]
