# formdoc/cli.py
import click, json, os
from .compiler import compile_schema
from .config import load_settings
from .converter import convert_html
from .errors import GenerationError
from .generator import generate_document
from .logger import get_logger
from .renderer import render_document

def _load_json(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)

def _ensure_dir(out):
    if os.path.dirname(out):
        os.makedirs(os.path.dirname(out), exist_ok=True)

@click.group()
@click.option('--env-file', default=None, help="Path to a .env file with FORMDOC_* settings")
@click.pass_context
def cli(ctx, env_file):
    settings = load_settings(env_file)
    get_logger(level=settings.log_level)
    ctx.obj = settings

@cli.command(name="compile")
@click.option('--schema', required=True)
@click.option('--out', required=True)
def compile_template(schema, out):
    config = compile_schema(_load_json(schema))
    _ensure_dir(out)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(config.to_json(), f, indent=2, ensure_ascii=False)
    click.echo(f"Wrote {out}")

@cli.command()
@click.option('--template', required=True, help="TemplateConfig JSON")
@click.option('--data', required=True, help="Form data JSON")
@click.option('--out', required=True)
@click.pass_obj
def render(settings, template, data, out):
    html = render_document(_load_json(template), _load_json(data), default_title=settings.default_title)
    _ensure_dir(out)
    with open(out, "w", encoding="utf-8") as f:
        f.write(html)
    click.echo(f"Wrote {out}")

@cli.command()
@click.option('--html', 'html_path', required=True)
@click.option('--out', required=True)
@click.pass_obj
def convert(settings, html_path, out):
    with open(html_path, "r", encoding="utf-8") as f:
        conversion = convert_html(f.read(), settings.max_convert_iterations)
    _ensure_dir(out)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(conversion.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
    click.echo(f"Wrote {out}")

@cli.command()
@click.option('--template', required=True, help="Template record JSON (name, json_schema, metadata)")
@click.option('--data', required=True)
@click.option('--format', 'file_type', type=click.Choice(["pdf", "docx"], case_sensitive=False), default="pdf")
@click.option('--out', required=True)
@click.pass_obj
def generate(settings, template, data, file_type, out):
    try:
        doc = generate_document(_load_json(template), _load_json(data), file_type, settings=settings)
    except GenerationError as e:
        raise click.ClickException(str(e))
    _ensure_dir(out)
    with open(out, "wb") as f:
        f.write(doc.content)
    click.echo(f"Wrote {out}")

if __name__ == "__main__":
    cli()
