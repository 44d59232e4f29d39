"""Prompt Builder Module

Turns a post's metadata into a natural-language image prompt: a
category-driven scene description, the destination, an excerpt of the
post itself and a fixed suffix that keeps text and watermarks out of the
generated photo.
"""

from typing import Dict

from .models import PostMeta

# Cities with a blog content directory; slug -> display name and country
CITY_CONFIG: Dict[str, Dict[str, str]] = {
    "dubai": {"name": "Dubai", "country": "United Arab Emirates"},
    "abu-dhabi": {"name": "Abu Dhabi", "country": "United Arab Emirates"},
    "bangkok": {"name": "Bangkok", "country": "Thailand"},
    "istanbul": {"name": "Istanbul", "country": "Turkey"},
    "london": {"name": "London", "country": "United Kingdom"},
    "new-york": {"name": "New York", "country": "USA"},
    "paris": {"name": "Paris", "country": "France"},
    "rome": {"name": "Rome", "country": "Italy"},
    "singapore": {"name": "Singapore", "country": "Singapore"},
    "tokyo": {"name": "Tokyo", "country": "Japan"},
}

# Checked in order; the first key contained in the category wins
CATEGORY_STYLE: Dict[str, str] = {
    "Itineraries": "A stunning aerial or panoramic view of iconic city landmarks during golden hour",
    "Things to Do": "Excited travelers exploring a vibrant iconic attraction with beautiful architecture",
    "Attractions": "A breathtaking wide-angle photograph of a world-famous landmark in magnificent detail",
    "Experiences & Activities": "Travelers enjoying a thrilling cultural or outdoor experience with vivid scenery",
    "Activities Planning": "Travelers enjoying a popular outdoor experience with dramatic scenery in the background",
    "Food & Dining": "An exquisite food photography shot of traditional local cuisine beautifully presented",
    "Hotels & Accommodation": "A luxurious hotel room or rooftop terrace with sweeping city views at sunset",
    "Hotels & Stays": "A luxurious hotel room or rooftop terrace with sweeping city views at sunset",
    "Booking & Experiences": "A scenic travel scene showing the most iconic experience in the destination",
    "Holiday Packages": "A postcard-perfect travel scene with pristine landscapes and iconic city landmarks",
    "Transport": "A modern transport hub, iconic bridge, or scenic road with the city skyline visible",
    "Transportation": "A modern transport hub, iconic bridge, or scenic road with the city skyline visible",
    "Money & Payments": "A stylish travel flatlay with local currency, passport, and cultural items",
    "Practical Information": "A well-organized travel scene showing a tourist exploring the city comfortably",
    "Essentials": "A colorful and informative travel scene with the city skyline and cultural elements",
    "Trust & Conversion": "A breathtaking panoramic view of the city that inspires wanderlust and discovery",
    "Comparisons": "A side-by-side travel scene comparing iconic cultural and modern experiences",
    "Safety & Health": "A bright and welcoming pedestrian promenade with locals and tourists strolling safely",
    "Special Guides": "A culturally rich scene capturing a unique aspect of local life and traditions",
    "Shopping": "An opulent shopping mall interior or a vibrant traditional market with colorful stalls",
    "Nightlife": "A dazzling city skyline or entertainment district lit up brilliantly at night",
    "Culture & History": "A magnificent historic monument or museum bathed in warm afternoon light",
    "Nature & Parks": "A serene natural landscape, park, or waterfront with lush greenery and clear skies",
    "Beaches": "A pristine beach with turquoise water, golden sand, and the city skyline in the distance",
    "Seasonal & Monthly": "A beautiful seasonal landscape or cityscape with dramatic sky and natural lighting",
    "Events & Festivals": "A vibrant festival or cultural celebration with colorful decorations and joyful crowds",
    "Day Trips": "A scenic countryside, mountain, or coastal view reachable as a day trip from the city",
    "Visa & Entry": "A sleek modern international airport terminal with light-filled glass architecture",
    "Budget Travel": "Travelers exploring colorful local streets and markets with authentic cultural ambiance",
    "Family Travel": "Families enjoying a fun outdoor attraction with playful energy and bright colors",
    "Solo Travel": "A lone traveler with a backpack admiring a breathtaking city or natural viewpoint",
    "Luxury Travel": "An ultra-luxurious pool, yacht, or fine-dining setting overlooking the city skyline",
    "Yacht & Cruise": "A luxurious yacht or cruise ship sailing past stunning city skyline and blue water",
}

DEFAULT_STYLE = "A beautiful travel photograph capturing the essence and atmosphere of the destination"

NO_TEXT_SUFFIX = (
    "Professional travel photography, ultra high quality, cinematic lighting, sharp focus, "
    "no text, no watermarks, no logos, no words, no letters, no numbers"
)

DESCRIPTION_EXCERPT_CHARS = 120


def category_style(category: str) -> str:
    """Scene description for a category, matched case-insensitively by substring."""
    lowered = category.lower()
    for key, style in CATEGORY_STYLE.items():
        if key.lower() in lowered:
            return style
    return DEFAULT_STYLE


def build_prompt(post: PostMeta) -> str:
    config = CITY_CONFIG.get(post.city_slug)
    city_name = config["name"] if config else post.city
    country = config["country"] if config else post.country
    excerpt = post.description[:DESCRIPTION_EXCERPT_CHARS]
    return (
        f"{category_style(post.category)} in {city_name}, {country}. "
        f'The scene relates to "{post.title}": {excerpt}. '
        f"Photorealistic, magazine-quality travel photo. {NO_TEXT_SUFFIX}."
    )


def fallback_prompt(context_id: str) -> str:
    """Generic prompt used after a content-policy rejection."""
    subject = context_id.replace("-", " ")
    return f"Beautiful travel photograph in {subject}, professional photography, no text."
