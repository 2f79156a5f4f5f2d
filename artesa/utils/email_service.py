"""
Email Service

Flask-Mail extension instance and the transactional messages sent by the
password reset flow. Sending errors propagate to the caller, which decides
how to answer the request.
"""

import logging
from flask import current_app
from flask_mail import Mail, Message

logger = logging.getLogger(__name__)

mail = Mail()


def build_reset_url(token):
    """Frontend link the user follows to choose a new password"""
    return f"{current_app.config['FRONTEND_URL']}/reset-password/{token}"


def send_password_reset_email(recipient, reset_token):
    """Send the password reset link to a user"""
    reset_url = build_reset_url(reset_token)

    msg = Message(
        'Recuperación de Contraseña - La Artesa',
        recipients=[recipient],
        sender=current_app.config.get('MAIL_DEFAULT_SENDER')
    )
    msg.html = f"""
    <html>
        <body>
            <h1>Recuperación de Contraseña</h1>
            <p>Has solicitado restablecer tu contraseña.</p>
            <p>Haz clic en el siguiente enlace para crear una nueva contraseña:</p>
            <p><a href="{reset_url}">{reset_url}</a></p>
            <p>Este enlace expirará en 1 hora.</p>
            <p>Si no solicitaste este cambio, puedes ignorar este correo.</p>
        </body>
    </html>
    """
    msg.body = (
        "Has solicitado restablecer tu contraseña.\n"
        f"Abre el siguiente enlace para crear una nueva contraseña: {reset_url}\n"
        "Este enlace expirará en 1 hora."
    )

    mail.send(msg)
    logger.info(f"Password reset email sent to {recipient}")
    return True
