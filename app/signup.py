from argparse import ArgumentParser
from typing import Callable, Optional

from client.api_client import WaitlistApiClient
from client.form_controller import WaitlistFormController
from client.models import REFERRAL_SOURCES, WorkflowStep
from config.settings import Settings, load_settings
from logging_config.logger import configure_logging


PROFILE_PROMPTS = (
    ("name", "Full name"),
    ("company", "Company"),
    ("role", "Role / Title"),
    ("referral_source", "How did you hear about us? (" + ", ".join(REFERRAL_SOURCES) + ")"),
    ("use_case", "What are you most excited to use Quickgage for?"),
    ("social", "LinkedIn or Twitter profile (optional)"),
)


def run_signup(
    controller: WaitlistFormController,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
    max_email_attempts: int = 3,
) -> bool:
    """Walks one user through the form. Returns True once confirmed."""
    attempts = 0

    while controller.step is WorkflowStep.EMAIL_ENTRY:
        if attempts >= max_email_attempts:
            return False
        attempts += 1

        if controller.error:
            write(controller.error)

        controller.update_email(read("Enter your email: ").strip())
        if not controller.submit_email_step():
            continue

        write("Step 2 of 2: Want early access? Move up the waitlist by telling us more.")
        answer = read("Share a few details? [y/N]: ").strip().lower()
        skip_profile = answer not in ("y", "yes")

        if not skip_profile:
            for field_name, prompt in PROFILE_PROMPTS:
                controller.update_profile_field(field_name, read(f"{prompt}: ").strip())

        controller.submit_final(skip_profile=skip_profile)

    write("You're on the list!")
    write(f"You're #{controller.display_position} on the waitlist")
    write(f"We'll email you at {controller.confirmed_email} when it's your turn.")
    return True


def build_api_client(
    settings: Settings,
    api_url: Optional[str] = None,
) -> WaitlistApiClient:
    return WaitlistApiClient(
        api_url or settings.client.api_url,
        timeout_seconds=settings.client.timeout_seconds,
    )


def main() -> None:
    parser = ArgumentParser(description="Join the Quickgage waitlist from a terminal")
    parser.add_argument(
        "--api-url",
        dest="api_url",
        required=False,
        help="Base URL of the waitlist API (default: WAITLIST_API_URL)",
    )
    args = parser.parse_args()

    settings = load_settings()
    configure_logging("WARNING")

    controller = WaitlistFormController(build_api_client(settings, args.api_url))

    if not run_signup(controller):
        print("Signup was not completed.")


if __name__ == "__main__":
    main()
