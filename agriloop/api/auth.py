from html import escape
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from .. import accounts, config, models, schemas
from ..deps import get_db, get_mailer, get_current_user, rate_limiter
from ..errors import AuthError, NotFoundError

router = APIRouter(prefix="/api", tags=["accounts"])


def _page(title: str, message: str, ok: bool, status_code: int, link: Optional[str] = None) -> HTMLResponse:
    colour = "#10b981" if ok else "#ef4444"
    button = f'<a href="{escape(link, quote=True)}" class="btn">Continue to Login</a>' if link else ""
    html = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(title)}</title>
  <style>
    body {{ font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; background: {colour};
           min-height: 100vh; display: flex; align-items: center; justify-content: center; margin: 0; }}
    .container {{ background: white; padding: 40px; border-radius: 12px; text-align: center; max-width: 400px; }}
    h1 {{ color: #1f2937; font-size: 24px; }}
    p {{ color: #6b7280; line-height: 1.6; }}
    .btn {{ display: inline-block; background: {colour}; color: white; padding: 12px 24px;
           text-decoration: none; border-radius: 8px; }}
  </style>
</head>
<body>
  <div class="container">
    <h1>{escape(title)}</h1>
    <p>{escape(message)}</p>
    {button}
  </div>
</body>
</html>"""
    return HTMLResponse(html, status_code=status_code)


@router.post("/signup", response_model=schemas.SignupOut)
def signup(data: schemas.SignupIn, db: Session = Depends(get_db), mailer=Depends(get_mailer), _rl=Depends(rate_limiter)):
    user = accounts.signup(db, data, mailer)
    return {
        "message": "Signup successful. Check your email to verify your account.",
        "user": user,
    }


@router.get("/verify-email", response_class=HTMLResponse)
def verify_email(token: Optional[str] = None, db: Session = Depends(get_db)):
    """Redeem the link mailed at signup. Answers with a small HTML page."""
    if not token:
        return _page(
            "Verification Failed",
            "Verification token is missing. Please check your email for the correct verification link.",
            ok=False, status_code=400,
        )
    try:
        flipped = accounts.verify_email(db, token)
    except AuthError:
        return _page(
            "Verification Failed",
            "Invalid or expired token. Please request a new verification email.",
            ok=False, status_code=400,
        )
    except NotFoundError:
        return _page(
            "User Not Found",
            "The user associated with this verification token could not be found.",
            ok=False, status_code=404,
        )
    if not flipped:
        return _page("Email already verified", "Your email address was already verified. You can log in.",
                     ok=True, status_code=200, link=config.FRONTEND_LOGIN_URL)
    return _page(
        "Your mail has been successfully verified",
        "Great! Your email address has been verified. You can now access all features of your account.",
        ok=True, status_code=200, link=config.FRONTEND_LOGIN_URL,
    )


@router.post("/login", response_model=schemas.LoginOut)
def login(data: schemas.LoginIn, db: Session = Depends(get_db), _rl=Depends(rate_limiter)):
    token, user = accounts.login(db, data.email, data.password)
    return {"message": "Login successful", "token": token, "user": user}


@router.get("/profile", response_model=schemas.ProfileOut)
def profile(user: models.User = Depends(get_current_user)):
    return user


@router.post("/logout")
def logout():
    # tokens are stateless; the client drops its copy
    return {"message": "Logged out successfully"}
