"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the rendering pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the run progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, includesDir,
          layoutsDir, outputFormat, jobs, strict
        - env_check: sourceFiles, envOK
        - site_load: siteConfig, resolver, renderer
        - documents_render: batchReport
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Site root containing the document sources
        outputdir: Directory rendered files are written to
        verbosity: Logging verbosity level (1-3)
        inputFile: Single document to render (relative to inputdir); empty
                   renders every document of the site
        includesDir: Optional includes directory override
        layoutsDir: Optional layouts directory override
        outputFormat: "html" or "source"
        jobs: Documents rendered in parallel
        strict: Treat warnings as errors
        envOK: Environment validation passed
        sourceFiles: Documents selected for rendering
        siteConfig: Loaded site configuration
        resolver: Resolver holding the loaded partials
        renderer: Renderer holding the loaded layouts
        batchReport: Per-document results
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    includesDir: Optional[str] = field(default=None)
    layoutsDir: Optional[str] = field(default=None)
    outputFormat: str = field(default="html")
    jobs: int = field(default=1)
    strict: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    sourceFiles: List[Path] = field(default_factory=list)
    siteConfig: Optional[Any] = field(default=None)  # SiteConfig at runtime
    resolver: Optional[Any] = field(default=None)    # Resolver at runtime
    renderer: Optional[Any] = field(default=None)    # Renderer at runtime
    batchReport: Optional[Any] = field(default=None)  # BatchReport at runtime

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the rendering pipeline.

        Args:
            options: Parsed CLI arguments (inputFile, outputFormat, etc.)
            inputdir: Site root directory
            outputdir: Directory for rendered output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        # Get the dictionary of all attributes from the Namespace
        options_dict = vars(options)

        # Get the set of valid field names for ProgramState
        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Filter options_dict to only include fields that exist in ProgramState
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        # Merge the filtered CLI options with the explicitly defined arguments.
        # This will override any defaults set in the dataclass.
        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        # Instantiate the dataclass by unpacking the merged dictionary.
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            site_load,
            documents_render,
            results_report
        )

    This is equivalent to:
        results_report(documents_render(site_load(env_check(initial_state))))

    But reads left-to-right instead of inside-out.
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
