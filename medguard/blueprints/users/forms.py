from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SelectField, BooleanField, SubmitField
from wtforms.validators import DataRequired, Length, Optional, Email

ROLE_CHOICES = [("VIEWER", "Visualizador"), ("ADMIN", "Administrador")]


class UserForm(FlaskForm):
    name = StringField("Nome", validators=[DataRequired(), Length(min=2, max=120)])
    email = StringField("E-mail", validators=[DataRequired(), Email(), Length(max=180)])
    password = PasswordField("Senha", validators=[Optional(), Length(min=6, max=128)])
    role = SelectField("Perfil", choices=ROLE_CHOICES, default="VIEWER")
    active = BooleanField("Ativo", default=True)
    cnpj = StringField("Restringir ao CNPJ (opcional)", validators=[Optional(), Length(max=20)])
    city = StringField("Restringir à cidade (opcional)", validators=[Optional(), Length(max=80)])
    submit = SubmitField("Salvar")
