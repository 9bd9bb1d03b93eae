"""Arabic display labels shared by views and exports."""

from kcms.models import Belt, OrganizationType, PeriodKind

BELT_LABELS_AR = {
    Belt.WHITE: "أبيض",
    Belt.YELLOW: "أصفر",
    Belt.ORANGE: "برتقالي",
    Belt.GREEN: "أخضر",
    Belt.BLUE: "أزرق",
    Belt.BROWN: "بني",
    Belt.BLACK: "أسود",
}

ORGANIZATION_TYPE_LABELS_AR = {
    OrganizationType.CLUB: "نادي",
    OrganizationType.YOUTH_CENTER: "مركز شباب",
}

PERIOD_KIND_LABELS_AR = {
    PeriodKind.EXAM: "فترة الاختبار",
    PeriodKind.SECONDARY: "فترة التسجيل الثانوي",
    PeriodKind.TOURNAMENT: "فترة البطولة",
}

NOT_SPECIFIED = "غير محدد"

MESSAGES = {
    "unauthorized": "لا يوجد صلاحية للوصول",
    "login_required": "يرجى تسجيل الدخول",
    "invalid_credentials": "البريد الإلكتروني أو كلمة المرور غير صحيحة",
    "logged_out": "تم تسجيل الخروج بنجاح",
    "confirm_delete": "هل أنت متأكد من الحذف؟",
    "load_failed": "حدث خطأ أثناء تحميل البيانات",
    "save_failed": "حدث خطأ أثناء الحفظ",
    "delete_failed": "حدث خطأ أثناء الحذف",
    "not_found": "العنصر غير موجود",
    "already_exists": "يوجد سجل بنفس البيانات بالفعل",
    "missing_fields": "بيانات ناقصة",
    "credentials_required": "البريد الإلكتروني وكلمة المرور مطلوبان",
    "email_taken": "البريد الإلكتروني مستخدم بالفعل",
    "no_active_period": "لا توجد فترة تسجيل نشطة حالياً",
    "ambiguous_active_period": "يوجد أكثر من فترة تسجيل نشطة لنفس النوع",
    "registered": "تم تسجيل اللاعب بنجاح!",
    "register_failed": "حدث خطأ أثناء التسجيل",
    "already_registered": "اللاعب مسجل بالفعل في هذه الفترة",
    "unregistered": "تم إلغاء تسجيل اللاعب بنجاح!",
    "unregister_failed": "حدث خطأ أثناء إلغاء التسجيل",
    "not_registered": "اللاعب غير مسجل في هذه الفترة",
    "nothing_to_export": "لا يوجد لاعبين مسجلين للتحميل",
    "invalid_period_dates": "تاريخ البداية يجب أن يكون قبل تاريخ النهاية",
    "unknown_kind": "نوع الفترة غير معروف",
    "unknown_format": "صيغة الملف غير مدعومة",
}


def belt_label(belt) -> str:
    """Arabic label for a belt value (enum or raw string); unknown values pass through."""
    if belt is None:
        belt = Belt.WHITE
    if not isinstance(belt, Belt):
        try:
            belt = Belt(str(belt))
        except ValueError:
            return str(belt)
    return BELT_LABELS_AR[belt]


def organization_type_label(value) -> str:
    if isinstance(value, OrganizationType):
        return ORGANIZATION_TYPE_LABELS_AR[value]
    return NOT_SPECIFIED


def message(key: str) -> str:
    return MESSAGES[key]


__all__ = [
    "BELT_LABELS_AR",
    "ORGANIZATION_TYPE_LABELS_AR",
    "PERIOD_KIND_LABELS_AR",
    "NOT_SPECIFIED",
    "MESSAGES",
    "belt_label",
    "organization_type_label",
    "message",
]
