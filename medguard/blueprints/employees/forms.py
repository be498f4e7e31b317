import re
from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired, FileAllowed
from wtforms import StringField, SubmitField
from wtforms.validators import DataRequired, Length, Optional, ValidationError


def only_digits(value: str) -> str:
    return re.sub(r"\D", "", value or "")


class EmployeeForm(FlaskForm):
    name = StringField("Nome completo", validators=[DataRequired(), Length(min=2, max=160)])
    cpf = StringField("CPF", validators=[DataRequired(), Length(max=14)])
    registration = StringField("Matrícula", validators=[DataRequired(), Length(max=32)])
    department = StringField("Setor", validators=[DataRequired(), Length(max=80)])
    role = StringField("Cargo", validators=[DataRequired(), Length(max=80)])
    cnpj = StringField("CNPJ (opcional)", validators=[Optional(), Length(max=20)])
    city = StringField("Cidade (opcional)", validators=[Optional(), Length(max=80)])
    submit = SubmitField("Salvar")

    def validate_cpf(self, field):
        if len(only_digits(field.data)) != 11:
            raise ValidationError("CPF deve conter 11 dígitos.")


class EmployeeImportForm(FlaskForm):
    arquivo = FileField("Planilha (.xlsx)", validators=[FileRequired(), FileAllowed(["xlsx"], "Envie um arquivo .xlsx")])
    submit = SubmitField("Importar")
