from typing import Tuple


def build_judge_assignment_email(
    name: str,
    game_title: str,
    default_password: str,
    profile_url: str,
) -> Tuple[str, str, str]:
    subject = "Judge Assignment Notification"
    text = (
        f"Dear {name},\n\n"
        f"You have been assigned as a judge for: {game_title}\n\n"
        f"Your default password is: {default_password}\n"
        "Please log in first and then change your password.\n"
        f"Go to {profile_url}\n\n"
        "Best regards,\n"
        "Admin\n"
    )
    html = f"""
    <html>
      <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #1b1f24;">
        <div style="max-width: 560px; margin: 0 auto; padding: 24px; border: 1px solid #e6e6e6; border-radius: 12px;">
          <h2 style="margin-top: 0;">Judge assignment</h2>
          <p>Dear {name},</p>
          <p>You have been assigned as a judge for <strong>{game_title}</strong>.</p>
          <p>Your default password is <strong>{default_password}</strong>. Please log in and change it.</p>
          <p style="text-align: center; margin: 24px 0;">
            <a href="{profile_url}" style="display:inline-block;padding:12px 18px;background:#11131a;color:#fff;text-decoration:none;border-radius:6px;">Open judge panel</a>
          </p>
          <p>Best regards,<br/>Admin</p>
        </div>
      </body>
    </html>
    """
    return subject, html, text
