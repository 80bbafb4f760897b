from dataclasses import dataclass
from datetime import date
from typing import Dict
from urllib.parse import quote

from .models import ApplicationRecord

TEMPLATE_NAMES = ("follow_up", "thank_you", "acceptance", "withdrawal")

# characters encodeURIComponent leaves alone besides alphanumerics and -_.~
_URI_SAFE = "!*'()"

@dataclass(frozen=True)
class EmailTemplate:
    name: str
    subject: str
    body: str

def _short_date(d: date) -> str:
    return f"{d.month}/{d.day}/{d.year}"

def build_templates(record: ApplicationRecord) -> Dict[str, EmailTemplate]:
    greeting = f"Dear {record.contact_person or 'Hiring Manager'},"
    position, company = record.position, record.company
    met_on = f"on {_short_date(record.interview_date)}" if record.interview_date else "recently"

    follow_up = f"""{greeting}

I hope this email finds you well. I wanted to follow up on my application for the {position} position at {company}, which I submitted on {_short_date(record.application_date)}.

I remain very interested in this opportunity and believe my skills and experience would make me a strong addition to your team. I would welcome the chance to discuss how I can contribute to {company}'s success.

Would it be possible to schedule a brief call to discuss my application further?

Thank you for your time and consideration.

Best regards,
[Your Name]"""

    thank_you = f"""{greeting}

Thank you for taking the time to meet with me {met_on} to discuss the {position} position at {company}.

I enjoyed learning more about the role and the team, and I'm even more excited about the opportunity to contribute to {company}. Our conversation reinforced my belief that my skills and experience align well with what you're looking for.

Please don't hesitate to reach out if you need any additional information from me. I look forward to hearing from you about the next steps.

Thank you again for your time and consideration.

Best regards,
[Your Name]"""

    acceptance = f"""{greeting}

I am delighted to formally accept the offer for the {position} position at {company}. Thank you for this wonderful opportunity.

I am excited to join the team and contribute to {company}'s success. Please let me know if there are any additional forms or information you need from me before my start date.

I look forward to working with you and the team.

Best regards,
[Your Name]"""

    withdrawal = f"""{greeting}

I hope this email finds you well. I am writing to formally withdraw my application for the {position} position at {company}.

After careful consideration, I have decided to pursue a different opportunity that aligns more closely with my current career goals. I truly appreciate the time you and your team invested in considering my application.

I have great respect for {company} and hope our paths may cross again in the future.

Thank you for your understanding.

Best regards,
[Your Name]"""

    return {
        "follow_up": EmailTemplate("follow_up", f"Following up on {position} application", follow_up),
        "thank_you": EmailTemplate("thank_you", f"Thank you for the {position} interview", thank_you),
        "acceptance": EmailTemplate("acceptance", f"Acceptance of {position} offer", acceptance),
        "withdrawal": EmailTemplate("withdrawal", f"Withdrawing application for {position}", withdrawal),
    }

def get_template(record: ApplicationRecord, name: str) -> EmailTemplate:
    templates = build_templates(record)
    if name not in templates:
        raise ValueError(f"Unknown template {name!r}; expected one of: {', '.join(TEMPLATE_NAMES)}")
    return templates[name]

def template_text(template: EmailTemplate) -> str:
    """Plain-text form for pasting into a mail client."""
    return f"Subject: {template.subject}\n\n{template.body}"

def encode_component(value: str) -> str:
    return quote(value, safe=_URI_SAFE)

def mailto_uri(record: ApplicationRecord, template: EmailTemplate) -> str:
    return (
        f"mailto:{record.contact_email or ''}"
        f"?subject={encode_component(template.subject)}"
        f"&body={encode_component(template.body)}"
    )
