"""Starter page settings for a fresh database.

Operators edit these values through the CMS; seeding only happens while the
settings table is empty, so it never overwrites their work.
"""

import logging

from .settings_db import SettingsDB

logger = logging.getLogger(__name__)

# (page, section, key, value, type, description)
DEFAULT_SETTINGS: tuple[tuple[str, str, str, str, str, str], ...] = (
    # Home
    ("home", "hero", "title", "Discover Original Art", "text", "Hero title"),
    ("home", "hero", "description", "<p>Original paintings and limited edition prints.</p>",
     "richtext", "Hero description"),
    ("home", "hero", "primary_button_text", "Explore Gallery", "text", "Primary button text"),
    ("home", "stats", "show_stats", "1", "boolean", "Show/hide stats section"),
    ("home", "stats", "stat1_label", "Original Artworks", "text", "First stat label"),
    ("home", "stats", "stat2_label", "Limited Editions", "text", "Second stat label"),
    ("home", "stats", "stat3_label", "Art Mediums", "text", "Third stat label"),
    ("home", "featured", "title", "Featured Artworks", "text", "Featured section title"),
    ("home", "featured", "button_text", "View All Artworks", "text", "Featured button text"),
    # Gallery
    ("gallery", "header", "title", "Art Gallery", "text", "Gallery page title"),
    ("gallery", "controls", "show_filters", "1", "boolean", "Show/hide gallery filters"),
    ("gallery", "controls", "show_search", "1", "boolean", "Show/hide gallery search"),
    ("gallery", "controls", "show_cart_button", "1", "boolean",
     "Show/hide add to cart buttons on artwork cards"),
    ("gallery", "controls", "show_favorite_button", "1", "boolean",
     "Show/hide favorite buttons on artwork cards"),
    ("gallery", "features", "feature1_title", "Custom Commissions", "text", "First feature card title"),
    ("gallery", "features", "feature1_description", "Personalized artwork tailored to your vision",
     "plaintext", "First feature card description"),
    ("gallery", "features", "feature2_title", "Studio Visits", "text", "Second feature card title"),
    ("gallery", "features", "feature2_description", "Visit the studio by appointment",
     "plaintext", "Second feature card description"),
    ("gallery", "footer_info", "info1_text", "Free consultation", "text", "First footer info text"),
    ("gallery", "footer_info", "info2_text", "Worldwide shipping", "text", "Second footer info text"),
    # About
    ("about", "story", "show_story", "1", "boolean", "Show/hide story section"),
    ("about", "story", "title", "The Artist's Journey", "text", "Story title"),
    ("about", "story", "content", "<p>Every painting starts with a walk outside.</p>",
     "richtext", "Story content"),
    ("about", "philosophy", "show_philosophy", "1", "boolean", "Show/hide philosophy section"),
    ("about", "philosophy", "title", "Artistic Philosophy", "text", "Philosophy title"),
    ("about", "philosophy", "card1_title", "Emotional Connection", "text", "First philosophy card title"),
    ("about", "philosophy", "card1_description",
     "Art should create an emotional response that resonates with the viewer.",
     "plaintext", "First philosophy card description"),
    ("about", "philosophy", "card2_title", "Authentic Expression", "text",
     "Second philosophy card title"),
    ("about", "philosophy", "card2_description",
     "Every piece is created with genuine passion.", "plaintext",
     "Second philosophy card description"),
    # Contact
    ("contact", "hero", "title", "Get in Touch", "text", "Contact page title"),
    ("contact", "info", "title", "Contact Information", "text", "Contact information section title"),
    ("contact", "info", "email_address", "hello@example.com", "text", "Contact email address"),
    ("contact", "info", "phone_number", "", "text", "Contact phone number"),
    ("contact", "info", "studio_address", "", "plaintext", "Studio address"),
    ("contact", "faq", "show_faq", "1", "boolean", "Show/hide FAQ section"),
    ("contact", "faq", "faq1_question", "Do you take commissions?", "text", "FAQ 1 question"),
    ("contact", "faq", "faq1_answer", "Yes, get in touch with your idea.", "plaintext", "FAQ 1 answer"),
    ("contact", "faq", "faq2_question", "Do you ship internationally?", "text", "FAQ 2 question"),
    ("contact", "faq", "faq2_answer", "Yes, prints and originals ship worldwide.", "plaintext",
     "FAQ 2 answer"),
    # Global
    ("global", "site", "site_name", "Gallery", "text", "Website name"),
    ("global", "site", "default_currency", "USD", "text", "Default currency code"),
    ("global", "contact", "email", "hello@example.com", "text", "Primary contact email"),
    ("global", "social", "social_instagram", "", "text", "Instagram profile URL"),
    ("global", "social", "social_facebook", "", "text", "Facebook page URL"),
)


def seed_defaults(settings_db: SettingsDB) -> int:
    """Insert :data:`DEFAULT_SETTINGS` into an empty settings table.

    Returns:
        Number of settings inserted (0 when the table already had rows)
    """
    if settings_db.count() > 0:
        logger.debug("Settings table not empty, skipping seed")
        return 0

    for sort_order, (page, section, key, value, setting_type, description) in enumerate(
        DEFAULT_SETTINGS, start=1
    ):
        settings_db.create(page, section, key, value, setting_type, description, sort_order)

    logger.info(f"Seeded {len(DEFAULT_SETTINGS)} default settings")
    return len(DEFAULT_SETTINGS)
