# Default public copy per locale, grouped by page section. Homepage content
# field names are "<section>_<key>", e.g. ``hero_title``.

EN = {
    "site": {
        "name": "Homestead Journal",
        "admin_title": "Editorial desk",
        "admin_subtitle": "Write, organise and publish stories from the homestead.",
        "back_to_home_label": "Back to the site",
        "logo_url": "",
    },
    "nav": {
        "tagline": "Stories from field, kitchen and barn",
        "latest_stories_label": "Latest stories",
        "sign_in_label": "Sign in",
    },
    "switcher": {
        "label": "Language",
        "english_label": "English",
        "dutch_label": "Dutch",
    },
    "hero": {
        "title": "Living closer to the land, one season at a time",
        "description": "Practical notes on gardening, preserving, animal care and the traditions that hold a homestead together.",
        "cta_primary_label": "Read the latest",
        "cta_secondary_label": "Browse topics",
        "editor_title": "From the editors",
        "editor_description": "Every story is written from our own fields and kitchen, tested before it is shared.",
        "editor_link_label": "Meet the team",
        "image_url": "",
    },
    "topics": {
        "title": "Topics",
        "description": "Find stories by theme.",
        "empty": "No topics yet.",
        "count_singular": "{{count}} story",
        "count_plural": "{{count}} stories",
    },
    "stories": {
        "title": "Latest stories",
        "description": "Fresh from the homestead.",
        "empty": "No stories have been published yet.",
        "count_label": "Stories",
        "count_singular": "{{count}} story",
        "count_plural": "{{count}} stories",
        "read_more": "Read more",
        "uncategorized": "Uncategorized",
    },
    "article": {
        "back_label": "Back to all stories",
        "updated_label": "Updated",
        "published_label": "Published",
    },
    "category": {
        "header_label": "Topic",
        "empty_label": "No stories in this topic yet.",
    },
    "login": {
        "username_label": "Username",
        "username_placeholder": "Your username",
        "password_label": "Password",
        "password_placeholder": "Your password",
        "sign_in_button_label": "Sign in",
        "signing_in_label": "Signing in…",
        "session_expired_message": "Your session has expired. Please sign in again.",
        "invalid_credentials_message": "Invalid username or password.",
        "success_message": "Signed in. Redirecting…",
        "loading_message": "Loading…",
    },
    "search": {
        "title": "Search",
        "placeholder": "Search stories and topics",
        "no_results": "Nothing matched your search.",
        "articles_heading": "Stories",
        "categories_heading": "Topics",
        "filters_label": "Filters",
        "filter_articles_label": "Stories",
        "filter_categories_label": "Topics",
        "clear_label": "Clear",
        "button_label": "Search",
        "results_heading_template": "Results for “{{query}}”",
        "minimum_characters_message": "Type at least {{count}} characters to search.",
    },
    "footer": {
        "note": "Written and photographed on our own land.",
        "signature": "With muddy boots, the Homestead Journal team",
    },
}

NL = {
    "site": {
        "name": "Homestead Journal",
        "admin_title": "Redactie",
        "admin_subtitle": "Schrijf, orden en publiceer verhalen van de hoeve.",
        "back_to_home_label": "Terug naar de site",
        "logo_url": "",
    },
    "nav": {
        "tagline": "Verhalen uit de tuin, de keuken en de stal",
        "latest_stories_label": "Nieuwste verhalen",
        "sign_in_label": "Inloggen",
    },
    "switcher": {
        "label": "Taal",
        "english_label": "Engels",
        "dutch_label": "Nederlands",
    },
    "hero": {
        "title": "Dichter bij het land leven, seizoen na seizoen",
        "description": "Praktische notities over moestuinieren, inmaken, dierenverzorging en de tradities die een hoeve samenhouden.",
        "cta_primary_label": "Lees het nieuwste",
        "cta_secondary_label": "Bekijk onderwerpen",
        "editor_title": "Van de redactie",
        "editor_description": "Elk verhaal komt uit onze eigen tuin en keuken en is getest voordat we het delen.",
        "editor_link_label": "Maak kennis met het team",
        "image_url": "",
    },
    "topics": {
        "title": "Onderwerpen",
        "description": "Vind verhalen per thema.",
        "empty": "Nog geen onderwerpen.",
        "count_singular": "{{count}} verhaal",
        "count_plural": "{{count}} verhalen",
    },
    "stories": {
        "title": "Nieuwste verhalen",
        "description": "Vers van de hoeve.",
        "empty": "Er zijn nog geen verhalen gepubliceerd.",
        "count_label": "Verhalen",
        "count_singular": "{{count}} verhaal",
        "count_plural": "{{count}} verhalen",
        "read_more": "Lees verder",
        "uncategorized": "Zonder onderwerp",
    },
    "article": {
        "back_label": "Terug naar alle verhalen",
        "updated_label": "Bijgewerkt",
        "published_label": "Gepubliceerd",
    },
    "category": {
        "header_label": "Onderwerp",
        "empty_label": "Nog geen verhalen in dit onderwerp.",
    },
    "login": {
        "username_label": "Gebruikersnaam",
        "username_placeholder": "Je gebruikersnaam",
        "password_label": "Wachtwoord",
        "password_placeholder": "Je wachtwoord",
        "sign_in_button_label": "Inloggen",
        "signing_in_label": "Bezig met inloggen…",
        "session_expired_message": "Je sessie is verlopen. Log opnieuw in.",
        "invalid_credentials_message": "Onjuiste gebruikersnaam of wachtwoord.",
        "success_message": "Ingelogd. Je wordt doorgestuurd…",
        "loading_message": "Laden…",
    },
    "search": {
        "title": "Zoeken",
        "placeholder": "Zoek verhalen en onderwerpen",
        "no_results": "Niets gevonden voor je zoekopdracht.",
        "articles_heading": "Verhalen",
        "categories_heading": "Onderwerpen",
        "filters_label": "Filters",
        "filter_articles_label": "Verhalen",
        "filter_categories_label": "Onderwerpen",
        "clear_label": "Wissen",
        "button_label": "Zoeken",
        "results_heading_template": "Resultaten voor “{{query}}”",
        "minimum_characters_message": "Typ minstens {{count}} tekens om te zoeken.",
    },
    "footer": {
        "note": "Geschreven en gefotografeerd op ons eigen land.",
        "signature": "Met modderige laarzen, het team van Homestead Journal",
    },
}

DICTIONARIES = {
    "en": EN,
    "nl": NL,
}
