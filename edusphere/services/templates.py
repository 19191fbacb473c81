"""HTML bodies for account emails."""
from datetime import datetime, timezone
from html import escape

BRAND = "EduSphere"
LOGO_URL = "https://res.cloudinary.com/dglgmkgt4/image/upload/v1754124919/eduSphere_fu67gz.png"


def _layout(title: str, body: str) -> str:
    year = datetime.now(timezone.utc).year
    return f"""
<div style="font-family: Arial, sans-serif; background-color: #f4f6f8; padding: 30px; text-align: center;">
  <div style="max-width: 550px; margin: auto; background: white; border-radius: 14px; padding: 35px 25px;">
    <div style="margin-bottom: 15px;">
      <img src="{LOGO_URL}" alt="{BRAND} Logo" style="width: 80px;">
    </div>
    <h2 style="color: #2e7dff; margin-bottom: 10px;">{title}</h2>
    {body}
  </div>
  <p style="font-size: 11px; color: #aaa; margin-top: 20px;">
    &copy; {year} {BRAND}. All rights reserved.
  </p>
</div>
"""


def _button(url: str, label: str) -> str:
    return (
        f'<a href="{escape(url, quote=True)}" style="display: inline-block; background: #2e7dff; '
        f'color: white; padding: 12px 28px; margin-top: 20px; border-radius: 8px; '
        f'text-decoration: none; font-weight: bold;">{label}</a>'
    )


def _full_name(first_name: str, last_name: str) -> str:
    return escape(f"{first_name} {last_name}".strip())


def otp_email(first_name: str, last_name: str, code: str, ttl_seconds: int) -> tuple[str, str]:
    minutes = max(ttl_seconds // 60, 1)
    body = f"""
    <p style="font-size: 15px; color: #555;">
      Hello <strong>{_full_name(first_name, last_name)}</strong>,<br>
      We received a request to verify your email for your <strong>{BRAND}</strong> account.
    </p>
    <div style="background: #f3f4f6; padding: 15px; border-radius: 8px; margin: 20px 0;
         font-size: 22px; font-weight: bold; letter-spacing: 4px;">{code}</div>
    <p style="color: #555; font-size: 14px;">
      This OTP will expire in <strong>{minutes} minutes</strong>. Do not share it with anyone.
    </p>
    <p style="font-size: 12px; color: #888;">If you didn't request this, please ignore this email.</p>
"""
    return f"{BRAND} - Email Verification", _layout("Email Verification", body)


def welcome_email(first_name: str, last_name: str, login_url: str) -> tuple[str, str]:
    body = f"""
    <p style="font-size: 15px; color: #555;">
      Hi <strong>{_full_name(first_name, last_name)}</strong>,<br>
      Your {BRAND} account has been created successfully.
    </p>
    {_button(login_url, f"Login to {BRAND}")}
    <p style="font-size: 12px; color: #888;">If you did not sign up for {BRAND}, please ignore this email.</p>
"""
    return f"{BRAND} - Your Account Has Been Created Successfully", _layout(f"Welcome to {BRAND}", body)


def provisioned_account_email(
    first_name: str, last_name: str, password: str, login_url: str
) -> tuple[str, str]:
    body = f"""
    <p style="font-size: 15px; color: #555;">
      Hi <strong>{_full_name(first_name, last_name)}</strong>,<br>
      Your {BRAND} account has been created via Google Sign-Up.
    </p>
    <div style="background: #f3f4f6; padding: 15px; border-radius: 8px; margin: 20px 0; font-size: 18px;">
      Temporary Password: <strong>{escape(password)}</strong>
    </div>
    <p style="color: #555; font-size: 14px;">Please log in and change this password immediately.</p>
    {_button(login_url, f"Login to {BRAND}")}
"""
    return f"{BRAND} - Your Account Has Been Created Successfully", _layout(f"Welcome to {BRAND}", body)


def password_reset_email(reset_url: str, ttl_seconds: int) -> tuple[str, str]:
    minutes = max(ttl_seconds // 60, 1)
    body = f"""
    <p style="font-size: 15px; color: #555;">
      You recently requested to reset the password for your <strong>{BRAND}</strong> account.
      Click the button below to choose a new one.
    </p>
    {_button(reset_url, "Change My Password")}
    <p style="color: #999; font-size: 13px; margin-top: 25px;">
      This link will expire in <strong>{minutes} minutes</strong>.
    </p>
    <p style="color: #777; font-size: 12px;">
      If you did not request a password reset, you can ignore this email.
    </p>
"""
    return f"{BRAND} - Password Reset Link", _layout("Password Reset Request", body)


def upload_notice_email(image_url: str) -> tuple[str, str]:
    body = f"""
    <p style="font-size: 15px; color: #555;">Your file has been uploaded.</p>
    {_button(image_url, "View file")}
"""
    return f"{BRAND} - New File Uploaded", _layout("Upload complete", body)
