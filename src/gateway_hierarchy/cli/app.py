import typer

from gateway_hierarchy.cli.edit import delete, edit
from gateway_hierarchy.cli.serve import serve_app
from gateway_hierarchy.cli.view import issues, show, stats, tree

app = typer.Typer(
    name="gateway-hierarchy",
    help="View and edit the bind/listener/route/backend tree of a gateway configuration.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("tree")(tree)
app.command("stats")(stats)
app.command("issues")(issues)
app.command("show")(show)
app.command("edit")(edit)
app.command("delete")(delete)
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
