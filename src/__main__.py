#!/usr/bin/env python3
"""
pressmark - Text-first article renderer

Renders Jekyll-style article sources into standalone output documents.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Text-first: Sources stay readable without rendering
    - Liquid-style tags: {% include %} partials and {% capture %} blocks
    - One source -> one output file, same relative path
    - A broken document never stops the rest of the site

Key Features:
    - YAML front matter exposed to templates as page.*
    - Builtin code (Pygments highlighted) and image partials
    - Template partials from _includes/, layouts from _layouts/
    - Per-document error isolation, optional parallel rendering

Usage:
    pressmark inputdir/ outputdir/ [--inputFile posts/article.md]

Examples:
    # Render every document of a site
    pressmark site/ public/

    # One article, resolved source instead of html
    pressmark site/ out/ --inputFile posts/scene-graphs.md --outputFormat source

    # Verbose output, four workers, warnings are errors
    pressmark site/ public/ --jobs 4 --strict -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import (
    LOG,
    PartialRegistry,
    Renderer,
    Resolver,
    SiteConfig,
    SiteConfigError,
    __version__,
    documents_renderBatch,
    layouts_load,
    sources_list,
    state_connectToLogger,
)
from .lib.renderer import OUTPUT_FORMATS
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
                                           _
   _ __  _ __ ___  ___ ___ _ __ ___   __ _ _ __| | __
  | '_ \| '__/ _ \/ __/ __| '_ ` _ \ / _` | '__| |/ /
  | |_) | | |  __/\__ \__ \ | | | | | (_| | |  |   <
  | .__/|_|  \___||___/___/_| |_| |_|\__,_|_|  |_|\_\
  |_|

  Text-first article renderer
"""

# Define CLI arguments
parser = ArgumentParser(
    description="pressmark - Text-first article renderer for Jekyll-style sources",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile",
    default="",
    type=str,
    help="Render only this document (relative to inputdir). Default: every document",
)

parser.add_argument(
    "--outputFormat",
    default="html",
    choices=OUTPUT_FORMATS,
    help="html wraps documents in their layout; source keeps front matter and resolves tags only",
)

parser.add_argument(
    "--includesDir",
    default=None,
    type=str,
    help=f"Directory with template partials. Defaults to inputdir/{appsettings.includes_dir}",
)

parser.add_argument(
    "--layoutsDir",
    default=None,
    type=str,
    help=f"Directory with page layouts. Defaults to inputdir/{appsettings.layouts_dir}",
)

parser.add_argument(
    "--jobs",
    default=appsettings.jobs,
    type=int,
    help="Number of documents rendered in parallel",
)

parser.add_argument(
    "--strict",
    action="store_true",
    default=appsettings.strict_mode,
    help="Treat unused captures and undefined variables as errors",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and collect the documents to render.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - sourceFiles: Documents to render
            - envOK: True if environment is valid

    Exits:
        1 if the input directory or input file is missing, the input file
        lies outside the input directory, or no documents were found
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    if state.inputFile:
        input_file = state.inputdir / state.inputFile
        if not input_file.is_file():
            print(f"Error: Input file not found: {input_file}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        if not input_file.resolve().is_relative_to(state.inputdir.resolve()):
            print(f"Error: Input file is outside {state.inputdir}: {input_file}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        state.sourceFiles = [input_file]
    else:
        state.sourceFiles = sources_list(state.inputdir)

    if not state.sourceFiles:
        print(f"Error: No documents found in {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    LOG(f"Found {len(state.sourceFiles)} document(s)", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def site_load(inputstate: ProgramState) -> ProgramState:
    """
    Load site configuration, partials and layouts.

    Everything shared by the documents is loaded here, before any document
    is rendered, and stays read-only afterwards.

    Args:
        inputstate: Program state after env_check

    Returns:
        ProgramState with added fields:
            - siteConfig: SiteConfig from _config.yml
            - resolver: Resolver with builtin and template partials
            - renderer: Renderer with the layout table

    Exits:
        1 if the site configuration, a partial or a layout is broken
    """

    state = inputstate.copy()

    LOG("Loading site...", level=1)

    try:
        state.siteConfig = SiteConfig(state.inputdir)
        registry = PartialRegistry()
        includes_dir = state.siteConfig.includesDir_get(state.includesDir)
        count = registry.templates_load(includes_dir) if includes_dir else 0
        LOG(f"Loaded {count} template partial(s)", level=2)

        layouts = layouts_load(state.siteConfig.layoutsDir_get(state.layoutsDir))
        LOG(f"Loaded {len(layouts or {})} layout(s)", level=2)
    except SiteConfigError as e:
        print(f"Site error: {e}", file=sys.stderr)
        sys.exit(1)

    state.resolver = Resolver(registry=registry, site=state.siteConfig, strict=state.strict)
    state.renderer = Renderer(layouts=layouts, site=state.siteConfig, output_format=state.outputFormat)
    return state


def documents_render(inputstate: ProgramState) -> ProgramState:
    """
    Render every selected document.

    Args:
        inputstate: Program state after site_load

    Returns:
        ProgramState with added field:
            - batchReport: BatchReport with one result per document
    """

    state = inputstate.copy()

    LOG(f"Rendering {len(state.sourceFiles)} document(s)...", level=1)

    state.batchReport = documents_renderBatch(
        state.sourceFiles,
        resolver=state.resolver,
        renderer=state.renderer,
        input_root=state.inputdir,
        output_root=state.outputdir,
        jobs=state.jobs,
    )
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display rendering results to user.

    Args:
        inputstate: Program state with batchReport populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if any document failed
    """
    state: ProgramState = inputstate.copy()
    report = state.batchReport

    for result in report.failed:
        print(f"{result.error_type}: {result.error}", file=sys.stderr)

    LOG(f"\nRendered {len(report.succeeded)} of {len(report.results)} document(s)", level=1)
    for result in report.succeeded:
        LOG(f"  {result.output_path}", level=2)

    if not report.status:
        print(f"Error: {len(report.failed)} document(s) failed", file=sys.stderr)
        sys.exit(1)
    return state


@chris_plugin(
    parser=parser,
    title="pressmark - Text-first article renderer",
    category="Documentation",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - render a site (or one document of it).

    Orchestrates the full pipeline:
        1. env_check: Validate paths, collect documents
        2. site_load: Load _config.yml, partials and layouts
        3. documents_render: Parse, resolve and render every document
        4. results_report: Display results, exit 1 on any failure

    Args:
        options: CLI arguments from argparse
        inputdir: Site root with the document sources
        outputdir: Directory where rendered documents are written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    # Execute rendering pipeline
    pipeline(state, env_check, site_load, documents_render, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
