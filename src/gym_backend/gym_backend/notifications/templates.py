"""HTML bodies for outgoing mail."""
from __future__ import annotations

from datetime import datetime


def _money(value: float) -> str:
    return f"{value:,.0f} VND"


def _day(value: datetime) -> str:
    return value.strftime("%d/%m/%Y")


def verification_code_email(*, full_name: str, code: str, ttl_minutes: int) -> tuple[str, str]:
    subject = "Verify your email"
    html = (
        f"<p>Hello {full_name},</p>"
        f"<p>Your verification code is <b>{code}</b> (expires in {ttl_minutes} minutes).</p>"
    )
    return subject, html


def reset_code_email(*, code: str, ttl_minutes: int) -> tuple[str, str]:
    subject = "Password reset code"
    html = f"<p>Your password reset code is <b>{code}</b> (expires in {ttl_minutes} minutes).</p>"
    return subject, html


def registration_confirmation_email(
    *,
    full_name: str,
    package_name: str,
    duration_days: int,
    start_date: datetime,
    end_date: datetime,
    original_price: float,
    discount_amount: float,
    final_price: float,
) -> tuple[str, str]:
    subject = f"Package registration confirmed - {package_name}"
    discount_line = f"<p><strong>Discount:</strong> -{_money(discount_amount)}</p>" if discount_amount > 0 else ""
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2>Welcome {full_name}!</h2>
      <p>You are now registered for <strong>{package_name}</strong>.</p>
      <div style="background: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
        <p><strong>Package:</strong> {package_name}</p>
        <p><strong>Duration:</strong> {duration_days} days</p>
        <p><strong>Starts:</strong> {_day(start_date)}</p>
        <p><strong>Ends:</strong> {_day(end_date)}</p>
        <p><strong>Price:</strong> {_money(original_price)}</p>
        {discount_line}
        <p><strong>Total:</strong> {_money(final_price)}</p>
      </div>
      <p>See you at the gym!</p>
    </div>
    """
    return subject, html
