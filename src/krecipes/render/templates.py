"""Jinja2 page templates for the static site."""

from __future__ import annotations

from typing import Any

from jinja2 import DictLoader, Environment, StrictUndefined, select_autoescape

from krecipes.content.types import slugify

BASE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{% block title %}{{ site.title }}{% endblock %}</title>
<meta name="description" content="{% block description %}{{ site.title }}{% endblock %}">
<link rel="canonical" href="{{ site.url }}{{ path }}">
</head>
<body>
<header><a href="/">{{ site.title }}</a> · <a href="/recipes/">All recipes</a></header>
<main>
{% block main %}{% endblock %}
</main>
</body>
</html>
"""

RECIPE = """{% extends "base.html" %}
{% block title %}{{ recipe.title }} | {{ site.title }}{% endblock %}
{% block description %}{{ recipe.meta.description }}{% endblock %}
{% block main %}
<article class="recipe">
<h1>{{ recipe.title }}</h1>
<p class="meta">
<a href="/recipes/{{ recipe.category_slug }}/">{{ recipe.category }}</a>
· <a href="/difficulty/{{ recipe.meta.difficulty }}/">{{ recipe.meta.difficulty }}</a>
· {{ recipe.meta.time_to_complete }}
· Kubernetes {{ recipe.meta.kubernetes_version }}
· {{ body.reading_minutes }} min read
</p>
<p class="byline">{{ recipe.meta.author }} · <time datetime="{{ recipe.meta.publish_date.isoformat() }}">{{ recipe.meta.publish_date.isoformat() }}</time>
{%- if recipe.meta.updated_date %} · updated <time datetime="{{ recipe.meta.updated_date.isoformat() }}">{{ recipe.meta.updated_date.isoformat() }}</time>{% endif %}</p>
{% if recipe.meta.prerequisites %}
<section class="prerequisites"><h2>Prerequisites</h2><ul>
{% for item in recipe.meta.prerequisites %}<li>{{ item }}</li>
{% endfor %}</ul></section>
{% endif %}
{% if body.headings %}
<nav class="toc"><ul>
{% for h in body.headings if h.level <= 3 %}<li class="toc-h{{ h.level }}"><a href="#{{ h.anchor }}">{{ h.text }}</a></li>
{% endfor %}</ul></nav>
{% endif %}
<div class="content">
{{ body.html | safe }}
</div>
{% if recipe.tags %}
<p class="tags">{% for tag in recipe.tags if tag | slugify %}<a href="/tags/{{ tag | slugify }}/">#{{ tag }}</a> {% endfor %}</p>
{% endif %}
{% if related %}
<section class="related"><h2>Related recipes</h2><ul>
{% for r in related %}<li><a href="/{{ r.url_path }}">{{ r.title }}</a></li>
{% endfor %}</ul></section>
{% endif %}
</article>
{% endblock %}
"""

LISTING = """{% extends "base.html" %}
{% block title %}{{ heading }} | {{ site.title }}{% endblock %}
{% block description %}{{ heading }} on {{ site.title }}{% endblock %}
{% block main %}
<h1>{{ heading }}</h1>
{% if groups %}
<ul class="groups">
{% for key, label, count in groups %}<li><a href="{{ key }}">{{ label }}</a> ({{ count }})</li>
{% endfor %}</ul>
{% endif %}
<ul class="recipes">
{% for r in recipes %}<li>
<a href="/{{ r.url_path }}">{{ r.title }}</a>
<span class="difficulty">{{ r.meta.difficulty }}</span>
<time datetime="{{ r.meta.publish_date.isoformat() }}">{{ r.meta.publish_date.isoformat() }}</time>
<p>{{ r.meta.description }}</p>
</li>
{% endfor %}</ul>
{% endblock %}
"""

TEMPLATES = {
    "base.html": BASE,
    "recipe.html": RECIPE,
    "listing.html": LISTING,
}


def create_environment() -> Environment:
    env = Environment(
        loader=DictLoader(TEMPLATES),
        autoescape=select_autoescape(["html", "xml"]),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
    )
    env.filters["slugify"] = slugify
    return env


class PageRenderer:
    """Renders full HTML pages; one Jinja2 environment per renderer."""

    def __init__(self, site_title: str, site_url: str) -> None:
        self.env = create_environment()
        self.site = {"title": site_title, "url": site_url.rstrip("/")}

    def render(self, template: str, path: str, **context: Any) -> str:
        """Render a page template.

        Args:
            template: Template name, ``recipe.html`` or ``listing.html``.
            path: Site-relative URL path of the page, used for the canonical link.
            **context: Template variables; every variable the template uses must be given.

        Returns:
            The full HTML document.
        """
        return self.env.get_template(template).render(site=self.site, path=path, **context)
