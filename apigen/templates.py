"""
Jinja2 templates for the generated binding module.

Templates are addressed by name through a DictLoader: "file" wraps the whole
module, "category" renders one section banner followed by its endpoints, and
"endpoint" renders one binding function.
"""

import json

from jinja2 import DictLoader, Environment, StrictUndefined

FILE_TEMPLATE = '''\
"""Alpha Vantage API bindings.

Generated by apigen from {{ documentation_url }}
Documentation retrieved {{ retrieved_at }}.

Do not edit by hand: rerun run_apigen.py to regenerate.
"""

from typing import Any


def _compact(params: dict) -> dict:
    """Drop optional arguments the caller left unset."""
    return {name: value for name, value in params.items() if value is not None}
{% for section in sections %}


{{ section }}
{% endfor %}
'''

CATEGORY_TEMPLATE = '''\
# {{ rule }}
# {{ readable_name }}
# {{ link }}
{% if description_lines %}
#
{% for line in description_lines %}
# {{ line }}
{% endfor %}
{% endif %}
# {{ rule }}
{% for endpoint in endpoints %}


{{ endpoint }}
{% endfor %}
'''

ENDPOINT_TEMPLATE = '''\
def {{ identifier }}({{ signature }}) -> Any:
    """{{ docstring | indent(4) }}
    """
    return client.query({{ function_code | pystr }}, _compact({
{% for arg in arguments %}
        {{ arg.query_name | pystr }}: {{ arg.name }},
{% endfor %}
    }))
'''

TEMPLATES = {
    "file": FILE_TEMPLATE,
    "category": CATEGORY_TEMPLATE,
    "endpoint": ENDPOINT_TEMPLATE,
}


def build_environment() -> Environment:
    """Jinja2 environment for rendering Python source (no HTML autoescaping)."""
    env = Environment(
        loader=DictLoader(TEMPLATES),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    # JSON string literals are valid Python string literals
    env.filters["pystr"] = json.dumps
    return env


def render(env: Environment, template_name: str, **context) -> str:
    return env.get_template(template_name).render(**context)
