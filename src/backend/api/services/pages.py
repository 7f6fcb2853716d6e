"""
Minimal HTML landing pages for links opened from account emails.
"""

from html import escape

from core.config import settings

_LAYOUT = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{title} - Vegobolt</title>
  <style>
    body {{ font-family: Arial, sans-serif; background: #f4f6f4; margin: 0; }}
    .card {{ max-width: 420px; margin: 60px auto; background: #fff; padding: 32px;
             border-radius: 8px; box-shadow: 0 2px 8px rgba(0,0,0,.1); text-align: center; }}
    h1 {{ color: {color}; font-size: 22px; }}
    input {{ width: 100%; padding: 10px; margin: 8px 0; box-sizing: border-box; }}
    button {{ background: #2e7d32; color: #fff; border: 0; padding: 12px 24px;
              border-radius: 4px; cursor: pointer; width: 100%; }}
    #result {{ margin-top: 12px; }}
  </style>
</head>
<body>
  <div class="card">
    <h1>{title}</h1>
    {body}
  </div>
</body>
</html>
"""

SUCCESS_COLOR = "#2e7d32"
FAILURE_COLOR = "#c62828"

_RESET_FORM = """\
<p>Enter a new password for your account.</p>
<form id="reset-form">
  <input type="password" id="password" placeholder="New password" minlength="{min_length}" required>
  <input type="password" id="confirm" placeholder="Confirm password" minlength="{min_length}" required>
  <button type="submit">Reset Password</button>
</form>
<p id="result"></p>
<script>
  document.getElementById("reset-form").addEventListener("submit", async (event) => {{
    event.preventDefault();
    const result = document.getElementById("result");
    const password = document.getElementById("password").value;
    if (password !== document.getElementById("confirm").value) {{
      result.textContent = "Passwords do not match";
      return;
    }}
    const response = await fetch("{action}", {{
      method: "POST",
      headers: {{ "Content-Type": "application/json" }},
      body: JSON.stringify({{ token: "{token}", newPassword: password }}),
    }});
    const body = await response.json();
    result.textContent = body.message;
    if (body.success) {{
      document.getElementById("reset-form").remove();
    }}
  }});
</script>
"""


def render_page(title: str, body: str, success: bool = True) -> str:
    return _LAYOUT.format(
        title=escape(title),
        body=body,
        color=SUCCESS_COLOR if success else FAILURE_COLOR,
    )


def verification_success_page(name: str) -> str:
    return render_page(
        "Email Verified",
        f"<p>Thanks, {escape(name)}. Your email has been verified.</p>"
        "<p>You can now log in to the Vegobolt app.</p>",
    )


def verification_failure_page(message: str) -> str:
    return render_page(
        "Verification Failed",
        f"<p>{escape(message)}</p><p>Request a new verification email from the app.</p>",
        success=False,
    )


def reset_password_page(token: str) -> str:
    form = _RESET_FORM.format(
        min_length=settings.security.min_password_length,
        action=f"{settings.api.api_prefix}/auth/reset-password",
        # Tokens are hex; escaping keeps anything else out of the script
        token=escape(token, quote=True),
    )
    return render_page("Reset Your Password", form)


def reset_link_invalid_page() -> str:
    return render_page(
        "Link Expired",
        "<p>This password reset link is invalid or has expired.</p>"
        "<p>Request a new one from the app.</p>",
        success=False,
    )
