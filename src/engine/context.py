"""Build the system prompt the portfolio assistant answers from.

The prompt is a plain-text summary of one portfolio followed by fixed
formatting and tone instructions. It is rebuilt on every chat turn, never
cached, and building it never fails: anything missing from the profile is
rendered as a placeholder.
"""

from typing import Iterable, Mapping, Optional, Union

from src.models.portfolio import (
    Certificate,
    Education,
    Experience,
    Profile,
    Project,
    Skill,
    SocialLink,
)

DEFAULT_EMAIL = "Not specified"

BIO_LIMIT = 200
TOP_PROJECT_DESCRIPTION_LIMIT = 200
PROJECT_DESCRIPTION_LIMIT = 120
CERTIFICATE_DESCRIPTION_LIMIT = 150

MAX_PROJECTS = 5
MAX_EXPERIENCES = 3
MAX_EDUCATION = 2
MAX_CERTIFICATES = 3

CONTACT_KEYWORDS = ("linkedin", "email", "portfolio")

NA = "N/A"
NOT_SPECIFIED = "Not specified"

RESPONSE_INSTRUCTIONS = """FORMATTING INSTRUCTIONS:
- Use *text* to make important words/phrases bold (skills, names, technologies, degrees, company names, metrics)
- Use #link_text|actual_url# for clickable links
- Keep responses concise (2-3 sentences max unless user asks for more)
- Use bullet points (•) for lists when appropriate
- If a field is missing, say 'Not specified' or 'N/A'

EXAMPLES:
- "*Node.js* is their top skill with *100%* confidence"
- "Connect via #LinkedIn|https://linkedin.com/in/username#"
- "They work at *Google Inc* as a *Senior Developer*"
- "Graduated with a *Computer Science* degree from *MIT*"

RESPONSE GUIDELINES:
- Be conversational and professional
- Focus on the most relevant information
- If asked about details not in summary, mention "I can share more about [topic] if you're interested"
- For contact, direct to the provided links using the # format
- Don't repeat information unnecessarily
- Be enthusiastic but not overly verbose"""


def truncate(text: Optional[str], limit: int) -> Optional[str]:
    """Cut ``text`` to ``limit`` characters, appending ``...`` if anything was cut."""
    if text is None:
        return None
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def join_non_empty(parts: Iterable[Optional[str]], sep: str = ", ") -> str:
    return sep.join(p for p in parts if p)


def format_link_marker(label: Optional[str], url: Optional[str]) -> str:
    """Render a ``#label|url#`` link marker."""
    return f"#{label or ''}|{url or ''}#"


def find_primary_contact(links: Iterable[SocialLink]) -> Optional[SocialLink]:
    """First link whose name mentions linkedin, email or portfolio."""
    for link in links:
        name = (link.name or "").lower()
        if any(keyword in name for keyword in CONTACT_KEYWORDS):
            return link
    return None


def _or(value: Optional[str], placeholder: str = NA) -> str:
    return value if value else placeholder


def _date_range(start: Optional[str], end: Optional[str]) -> str:
    return f"{_or(start)} - {_or(end)}"


def _confidence(skill: Skill) -> Union[int, float]:
    return skill.confidence if skill.confidence is not None else 0


def _format_skill(skill: Skill) -> str:
    return f"{_or(skill.name, NOT_SPECIFIED)} ({_confidence(skill)}%)"


def _format_project(project: Project, detailed: bool) -> str:
    limit = TOP_PROJECT_DESCRIPTION_LIMIT if detailed else PROJECT_DESCRIPTION_LIMIT
    skills = join_non_empty(s.name for s in project.skills)
    live = format_link_marker("Live Demo", project.live_link) if project.live_link else NA
    github = format_link_marker("GitHub", project.github_link) if project.github_link else NA

    lines = [
        f"• *{project.name or project.title or 'Untitled project'}*",
        f"  Description: {_or(truncate(project.description, limit))}",
        f"  Skills: {_or(skills)}",
        f"  Timeline: {_date_range(project.start_date, project.end_date)}",
        f"  Live: {live} | GitHub: {github}",
    ]
    if detailed:
        lines += [
            f"  Thumbnail: {_or(project.thumbnail)}",
            f"  Video: {_or(project.video_link)}",
            f"  Contributions: {_or(project.contributions)}",
        ]
    return "\n".join(lines)


def _format_experience(exp: Experience) -> str:
    company = _or(exp.company_name)
    website = (
        format_link_marker(company, exp.company_website)
        if exp.company_website
        else NA
    )
    return "\n".join(
        [
            f"• *{_or(exp.title)}* at *{company}*",
            f"  Type: {_or(exp.employee_type)}",
            f"  Duration: {_date_range(exp.start_date, exp.end_date)}",
            f"  Location: {_or(exp.location)} ({_or(exp.location_type)})",
            f"  Company Website: {website}",
        ]
    )


def _format_education(edu: Education) -> str:
    return "\n".join(
        [
            f"• *{_or(edu.degree)}* from *{_or(edu.school)}*",
            f"  Duration: {_date_range(edu.start_date, edu.end_date)}",
            f"  Grade: {_or(edu.grade)}",
        ]
    )


def _format_certificate(cert: Certificate) -> str:
    description = truncate(cert.description, CERTIFICATE_DESCRIPTION_LIMIT)
    return "\n".join(
        [
            f"• *{_or(cert.name)}*",
            f"  Description: {_or(description)}",
        ]
    )


def _format_social_link(link: SocialLink) -> str:
    return f"• {_or(link.name)}: {format_link_marker(link.name, link.url)}"


def build_context(
    profile: Union[Profile, Mapping],
    default_email: str = DEFAULT_EMAIL,
) -> str:
    """Render the assistant system prompt for one portfolio.

    Sections, in order: preamble, summary, social links, top and all skills
    (sorted by confidence, highest first), top projects, the first five
    projects, recent experience, education, certificates, primary contact
    and the static response instructions.
    """
    if not isinstance(profile, Profile):
        profile = Profile.model_validate(profile)

    owner = profile.full_name or profile.username
    location = join_non_empty([profile.city, profile.state, profile.country])
    bio = truncate(profile.bio, BIO_LIMIT) if profile.bio else "No bio provided"
    profile_pic = profile.profile_pic_url or NOT_SPECIFIED

    # sorted() is stable, so equal confidences keep their input order
    skills = sorted(profile.skills, key=_confidence, reverse=True)
    top_skills = ", ".join(_format_skill(s) for s in skills if s.top is True)
    all_skills = ", ".join(_format_skill(s) for s in skills)

    top_projects = "\n\n".join(
        _format_project(p, detailed=True) for p in profile.projects if p.top is True
    )
    all_projects = "\n\n".join(
        _format_project(p, detailed=False) for p in profile.projects[:MAX_PROJECTS]
    )
    experience = "\n\n".join(
        _format_experience(e) for e in profile.experiences[:MAX_EXPERIENCES]
    )
    education = "\n\n".join(
        _format_education(e) for e in profile.education[:MAX_EDUCATION]
    )
    certificates = "\n\n".join(
        _format_certificate(c) for c in profile.certificates[:MAX_CERTIFICATES]
    )
    social_links = "\n".join(_format_social_link(link) for link in profile.social_links)

    contact = find_primary_contact(profile.social_links)
    contact_line = (
        f"{contact.name}: {format_link_marker(contact.name, contact.url)}"
        if contact
        else "Check portfolio for contact info"
    )

    summary = [
        f"- Username: {_or(profile.username, NOT_SPECIFIED)}",
        f"- Email: {profile.email or default_email}",
        f"- Full Name: {_or(profile.full_name, NOT_SPECIFIED)}",
        f"- Location: {_or(location, NOT_SPECIFIED)}",
        f"- Profile Picture: {profile_pic}",
        f"- Bio: {bio}",
    ]
    if profile.created_at:
        summary.append(f"- Created At: {profile.created_at}")
    if profile.updated_at:
        summary.append(f"- Updated At: {profile.updated_at}")

    sections = [
        "You are a professional AI assistant for "
        f"*{owner or 'the portfolio owner'}* (username: {_or(profile.username)}).",
        "PORTFOLIO SUMMARY:\n" + "\n".join(summary),
        f"SOCIAL LINKS:\n{social_links or 'No social links listed'}",
        f"TOP SKILLS (sorted by confidence): {top_skills or 'No top skills marked'}",
        "NOTE: If the user asks for *all* skills, you can share this full list:\n"
        f"ALL SKILLS (sorted by confidence): {all_skills or 'No skills listed'}",
        f"TOP PROJECTS (detailed):\n{top_projects or 'No top projects listed'}",
        f"ALL PROJECTS (detailed):\n{all_projects or 'No projects listed'}",
        f"RECENT EXPERIENCE (detailed):\n{experience or 'No experience listed'}",
        f"EDUCATION (detailed):\n{education or 'No education listed'}",
        f"CERTIFICATES (detailed):\n{certificates or 'No certificates listed'}",
        f"CONTACT: {contact_line}",
        RESPONSE_INSTRUCTIONS,
        f"Remember: You represent {owner or 'this person'} professionally. "
        "Use the formatting markers to highlight important information "
        "and make links clickable.",
    ]
    return "\n\n".join(sections)
