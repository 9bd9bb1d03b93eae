"""Forms behind the admin CRUD screens.

Flask-WTF reads these from a submitted HTML form or from a JSON body.
"""

from __future__ import annotations

from flask_wtf import FlaskForm
from wtforms import DateField, EmailField, IntegerField, PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, Email, Length, NumberRange, Optional, ValidationError

from kcms.labels import BELT_LABELS_AR, ORGANIZATION_TYPE_LABELS_AR, message
from kcms.models import Belt, OrganizationType


class OrganizationForm(FlaskForm):
    name = StringField("الاسم", validators=[DataRequired(), Length(min=2, max=255)])
    type = SelectField(
        "النوع",
        choices=[(t.value, label) for t, label in ORGANIZATION_TYPE_LABELS_AR.items()],
        validators=[DataRequired()],
    )

    def to_data(self) -> dict:
        return {
            'name': self.name.data.strip(),
            'type': OrganizationType(self.type.data),
        }


class CoachForm(FlaskForm):
    full_name = StringField("الاسم الكامل", validators=[DataRequired(), Length(min=2, max=255)])
    # Only used when creating: the login identity is provisioned with them
    email = EmailField("البريد الإلكتروني", validators=[Optional(), Email()])
    password = PasswordField("كلمة المرور", validators=[Optional(), Length(min=6, max=128)])
    organization_id = StringField("المؤسسة", validators=[DataRequired(), Length(max=36)])

    def to_data(self) -> dict:
        return {
            'full_name': self.full_name.data.strip(),
            'organization_id': self.organization_id.data,
        }


class PlayerForm(FlaskForm):
    full_name = StringField("الاسم الكامل", validators=[DataRequired(), Length(min=2, max=255)])
    coach_id = StringField("المدرب", validators=[DataRequired(), Length(max=36)])
    organization_id = StringField("المؤسسة", validators=[Optional(), Length(max=36)])
    belt = SelectField(
        "الحزام",
        choices=[(b.value, label) for b, label in BELT_LABELS_AR.items()],
        default=Belt.WHITE.value,
        validators=[DataRequired()],
    )
    birth_date = DateField("تاريخ الميلاد", validators=[Optional()])
    file_number = IntegerField("رقم الملف", validators=[Optional(), NumberRange(min=1, max=32767)])

    def to_data(self) -> dict:
        return {
            'full_name': self.full_name.data.strip(),
            'coach_id': self.coach_id.data,
            'organization_id': self.organization_id.data or None,
            'belt': Belt(self.belt.data),
            'birth_date': self.birth_date.data,
            'file_number': self.file_number.data,
        }


class PeriodForm(FlaskForm):
    name = StringField("اسم الفترة", validators=[DataRequired(), Length(min=2, max=255)])
    start_date = DateField("تاريخ البداية", validators=[DataRequired()])
    end_date = DateField("تاريخ النهاية", validators=[DataRequired()])

    def validate_end_date(self, field):
        if self.start_date.data and field.data and field.data < self.start_date.data:
            raise ValidationError(message('invalid_period_dates'))

    def to_data(self) -> dict:
        return {
            'name': self.name.data.strip(),
            'start_date': self.start_date.data,
            'end_date': self.end_date.data,
        }


__all__ = ['OrganizationForm', 'CoachForm', 'PlayerForm', 'PeriodForm']
