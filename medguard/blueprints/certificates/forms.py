from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileAllowed
from wtforms import StringField, SelectField, DateField, IntegerField, BooleanField, TextAreaField, SubmitField
from wtforms.validators import DataRequired, Length, NumberRange, Optional, ValidationError
from ...services.records import CERTIFICATE_TYPES, CERTIFICATE_STATUSES


class CertificateForm(FlaskForm):
    employee_id = SelectField("Funcionário", validators=[DataRequired(message="Por favor, selecione um funcionário.")])
    issue_date = DateField("Data de emissão", validators=[Optional()])
    start_date = DateField("Início do afastamento", validators=[DataRequired(message="As datas de início e término são obrigatórias.")])
    end_date = DateField("Término do afastamento", validators=[DataRequired(message="As datas de início e término são obrigatórias.")])
    days = IntegerField("Dias", validators=[Optional(), NumberRange(min=1, max=730)])

    lgpd_consent = BooleanField("Consentimento LGPD para registrar o CID")
    cid = StringField("CID-10", validators=[Optional(), Length(max=10)])

    doctor_name = StringField("Médico", validators=[DataRequired(), Length(max=120)])
    crm = StringField("CRM", validators=[DataRequired(), Length(max=20)])
    type = SelectField("Tipo", choices=[(t, t) for t in CERTIFICATE_TYPES], default="Doença")
    status = SelectField("Situação", choices=[
        ("ACTIVE", "Ativo"),
        ("PENDING", "Pendente"),
        ("EXPIRED", "Encerrado"),
    ], default="ACTIVE")
    observations = TextAreaField("Observações", validators=[Optional(), Length(max=2000)])

    arquivo = FileField("Anexo (PDF ou imagem)", validators=[
        FileAllowed(["pdf", "png", "jpg", "jpeg", "webp"], "Envie PDF ou imagem."),
    ])
    submit = SubmitField("Salvar")

    def validate_end_date(self, field):
        if self.start_date.data and field.data and field.data < self.start_date.data:
            raise ValidationError("A data de término não pode ser anterior à de início.")

    def validate_status(self, field):
        if field.data not in CERTIFICATE_STATUSES:
            raise ValidationError("Situação inválida.")
