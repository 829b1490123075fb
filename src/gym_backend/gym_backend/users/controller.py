from __future__ import annotations

from flask import Flask

from ..common.http import bearer_token, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_body()
        token = bearer_token()
        caller = auth.authenticate_access_token(token) if token else {}
        result = auth.register(
            full_name=data.get("full_name"),
            email=data.get("email"),
            password=data.get("password"),
            role=data.get("role"),
            assigned_by=caller.get("role"),
        )
        return ok(
            result.user.public_view(),
            status=201,
            message="Registration successful. Please check your email for the verification code.",
            email_sent=result.email_sent,
        )

    @app.route("/api/auth/verify-email", methods=["POST"], endpoint="auth_verify_email")
    def auth_verify_email():
        data = json_body()
        auth.verify_email(email=data.get("email"), code=data.get("code"))
        return ok(message="Email verified")

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        result = auth.login(email=data.get("email"), password=data.get("password"))
        return ok(
            result.user.public_view(),
            access_token=result.tokens.access_token,
            refresh_token=result.tokens.refresh_token,
        )

    @app.route("/api/auth/refresh", methods=["POST"], endpoint="auth_refresh")
    def auth_refresh():
        data = json_body()
        tokens = auth.refresh(data.get("refresh_token"))
        return ok(access_token=tokens.access_token, refresh_token=tokens.refresh_token)

    @app.route("/api/auth/forgot-password", methods=["POST"], endpoint="auth_forgot_password")
    def auth_forgot_password():
        result = auth.forgot_password(email=json_body().get("email"))
        # email_sent would reveal whether the account exists
        return ok(message=result["message"])

    @app.route("/api/auth/reset-password", methods=["POST"], endpoint="auth_reset_password")
    def auth_reset_password():
        data = json_body()
        auth.reset_password(email=data.get("email"), code=data.get("code"), new_password=data.get("new_password"))
        return ok(message="Password has been reset")

    @app.route("/api/auth/resend-verification", methods=["POST"], endpoint="auth_resend_verification")
    def auth_resend_verification():
        email_sent = auth.resend_verification(email=json_body().get("email"))
        return ok(message="A new verification code has been sent", email_sent=email_sent)
