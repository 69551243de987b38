#!/usr/bin/env python3
"""Ad hoc command line runner for the cook-along service.

Run generator and favorites operations directly from a terminal.

Usage:
    python cook.py search "paneer butter masala"          # Generate one recipe
    python cook.py variations "chicken curry"              # Generate several variations
    python cook.py ingredients "rice, eggs, spring onion"  # Recipe from what you have
    python cook.py category Desserts                       # AI ideas for a category
    python cook.py categories                              # List categories
    python cook.py show 2 --language Hindi --cooktop "Induction Cooktop"
    python cook.py favorite 2                              # Add/remove a favorite
    python cook.py favorites --user <supabase-user-id>     # List favorites

Flags:
    --user ID         Act as an authenticated user (remote favorites). Guest otherwise.
    --language NAME   Translate the recipe shown (English, Hindi, Hinglish).
    --cooktop NAME    Adapt the steps shown (LPG Cooktop, Induction Cooktop, Simple Electric Kettle).
    --debug           Print the full recipe JSON.
    --verbose         Log at DEBUG level.
"""

import asyncio
import sys

from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from cookalong.models.models import Cooktop, Language, Recipe
from cookalong.services.catalog import RecipeCatalog
from cookalong.services.gemini import GeminiRecipeGateway
from cookalong.state.favorites import FavoritesStore
from cookalong.state.identity import Identity
from cookalong.state.session import RecipeSession
from cookalong.state.timer import format_time
from cookalong.utils.config import config
from cookalong.utils.logger import logger, set_level

console = Console()

COMMANDS = ("search", "variations", "ingredients", "category", "categories", "show", "favorite", "favorites")


def render_session(session: RecipeSession) -> str:
    """Markdown for what the session currently displays."""
    view = session.display
    recipe = session.working
    lines = [
        f"# {view.name}",
        "",
        view.description,
        "",
        f"**Category:** {recipe.category or '-'} | **Prep:** {recipe.prep_time} min | "
        f"**Cook:** {recipe.cook_time} min | **Serves:** {recipe.servings}",
        f"**Language:** {view.language.value} | **Cooktop:** {view.cooktop.value}",
        "",
        "## Ingredients",
        "",
    ]
    lines += [f"- {ingredient}" for ingredient in view.ingredients]
    lines += ["", "## Steps", ""]
    for i, step in enumerate(view.steps):
        timer = f" _(timer {format_time(step.time)})_" if step.time else ""
        lines.append(f"{i + 1}. {step.description}{timer}")
    return "\n".join(lines)


def render_recipe_list(title: str, recipes: list[Recipe]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Category")
    table.add_column("Time", justify="right")
    for recipe in recipes:
        table.add_row(recipe.id, recipe.name, recipe.category, f"{recipe.total_time} min")
    return table


async def show_recipe(
    catalog: RecipeCatalog,
    recipe: Recipe,
    language: Language,
    cooktop: Cooktop,
    debug: bool,
) -> None:
    session = RecipeSession(recipe, catalog.gateway, favorites=catalog.favorites)
    try:
        if cooktop != Cooktop.default():
            result = await session.request_cooktop_adaptation(cooktop)
            if not result:
                console.print(f"[yellow]{result.message}[/yellow]")
        if language != Language.default():
            result = await session.request_translation(language)
            if not result:
                console.print(f"[yellow]{result.message}[/yellow]")

        if debug:
            console.print_json(data=session.working.to_record())
        console.print(Markdown(render_session(session)))
    finally:
        session.close()


async def run_command(command: str, argument: str, *, user_id, language, cooktop, debug) -> int:
    if user_id and not config.USE_REMOTE_FAVORITES:
        console.print("[red]✗ --user needs USE_REMOTE_FAVORITES=true[/red]")
        return 1
    identity = Identity.authenticated(user_id) if user_id else Identity.guest()
    favorites = FavoritesStore(identity)
    catalog = RecipeCatalog(GeminiRecipeGateway(), favorites=favorites)

    if command == "categories":
        for category in catalog.categories:
            console.print(f"- {category}")
        return 0

    if command in ("favorites", "favorite", "show"):
        loaded = await favorites.load()
        if not loaded:
            style = "red" if favorites.setup_required else "yellow"
            console.print(f"[{style}]{favorites.error}[/{style}]")
            if command == "favorites":
                return 1

    if command == "favorites":
        if not favorites.favorites:
            console.print("[dim]No favorites yet.[/dim]")
            return 0
        console.print(render_recipe_list(f"Favorites ({identity.kind.value})", list(favorites.favorites)))
        return 0

    if command == "favorite":
        recipe = catalog.find(argument)
        if recipe is None:
            console.print(f"[red]✗ Recipe not found: {argument}[/red]")
            return 1
        was_favorite = favorites.is_favorite(recipe.id)
        result = await favorites.remove(recipe.id) if was_favorite else await favorites.add(recipe)
        if not result:
            console.print(f"[red]✗ {result.message}[/red]")
            return 1
        console.print(f"[green]✓ {'Removed' if was_favorite else 'Added'} {recipe.name}[/green]")
        return 0

    if command == "show":
        recipe = catalog.find(argument)
        if recipe is None:
            console.print(f"[red]✗ Sorry, we couldn't find the recipe you're looking for: {argument}[/red]")
            return 1
        await show_recipe(catalog, recipe, language, cooktop, debug)
        return 0

    if command in ("variations", "category"):
        if command == "variations":
            result = await catalog.search(argument)
        else:
            result = await catalog.browse_category(argument)
        if not result:
            console.print(f"[red]✗ {result.message}[/red]")
            return 1
        console.print(render_recipe_list(argument, result.value))
        return 0

    if command == "ingredients":
        result = await catalog.generate_from_ingredients(argument.split(","))
    else:
        result = await catalog.generate_for_query(argument)
    if not result:
        console.print(f"[red]✗ {result.message}[/red]")
        return 1
    await show_recipe(catalog, result.value, language, cooktop, debug)
    return 0


def print_usage() -> None:
    print(__doc__)


if __name__ == "__main__":
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print_usage()
        sys.exit(1)

    command = sys.argv[1]
    user_id = None
    language = Language.default()
    cooktop = Cooktop.default()
    debug_mode = False
    positional = []

    args = sys.argv[2:]
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--debug":
            debug_mode = True
        elif arg == "--verbose":
            set_level("DEBUG")
        elif arg in ("--user", "--language", "--cooktop"):
            i += 1
            if i >= len(args):
                print(f"Error: {arg} flag requires a value")
                sys.exit(1)
            value = args[i]
            try:
                if arg == "--user":
                    user_id = value
                elif arg == "--language":
                    language = Language(value)
                else:
                    cooktop = Cooktop(value)
            except ValueError:
                print(f"Error: unsupported value for {arg}: {value}")
                sys.exit(1)
        elif arg.startswith("--"):
            print(f"Unknown flag: {arg}")
            sys.exit(1)
        else:
            positional.append(arg)
        i += 1

    argument = " ".join(positional)
    if command not in ("categories", "favorites") and not argument:
        print(f"Error: '{command}' needs an argument")
        sys.exit(1)

    # Missing credentials are fatal before any session starts
    try:
        config.validate()
    except ValueError as e:
        console.print(f"[red]✗ Configuration error: {e}[/red]")
        sys.exit(1)

    try:
        exit_code = asyncio.run(
            run_command(command, argument, user_id=user_id, language=language, cooktop=cooktop, debug=debug_mode)
        )
    except KeyboardInterrupt:
        logger.info("\nInterrupted by user.")
        sys.exit(0)
    sys.exit(exit_code)
