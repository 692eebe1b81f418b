"""Track selection pipeline orchestrator."""

from streamsift.config import Config
from streamsift.core.defaults import DefaultLanguageResolver
from streamsift.core.predicate import PredicateEvaluator
from streamsift.core.remover import TrackRemover
from streamsift.core.sorter import TrackSorter
from streamsift.models.media import MediaDescriptor
from streamsift.models.result import ProcessResult
from streamsift.utils.logger import get_logger

logger = get_logger(__name__)


class StreamPipeline:
    """Runs the configured removal, sort and default steps on a descriptor."""

    def __init__(self, config: Config):
        """Initialize the pipeline with configuration.

        Args:
            config: Application configuration
        """
        self.config = config
        self.remover = TrackRemover()
        self.sorter = TrackSorter(config.variables)
        self.resolver = DefaultLanguageResolver()
        self.evaluator = PredicateEvaluator(config.variables)

    def process(self, descriptor: MediaDescriptor) -> ProcessResult:
        """Process one descriptor in place.

        Pipeline steps:
        1. Removal rules, in configured order
        2. Sort steps, in configured order
        3. Default-language resolution

        Args:
            descriptor: Parsed media; its streams are modified in place

        Returns:
            ProcessResult summarizing what changed
        """
        result = ProcessResult(parse_issues=len(descriptor.issues))

        if descriptor.had_issues:
            logger.warning(
                "Processing partially parsed media",
                file=descriptor.filename,
                issues=[str(issue) for issue in descriptor.issues],
            )

        # Step 1: Removals
        deleted_before = sum(1 for s in descriptor.all_streams() if s.deleted)
        for step in self.config.removals:
            streams = descriptor.streams_of(step.stream_type)
            if self.remover.apply(streams, step.rule):
                logger.info(
                    "Removal rule matched",
                    file=descriptor.filename,
                    stream_type=step.stream_type.value,
                    match_type=step.rule.match_type.value,
                )
        result.removed = sum(1 for s in descriptor.all_streams() if s.deleted) - deleted_before

        # Step 2: Sorting
        for step in self.config.sorters:
            streams = descriptor.streams_of(step.stream_type)
            if self.sorter.apply(streams, step.criteria):
                if step.stream_type.value not in result.reordered:
                    result.reordered.append(step.stream_type.value)

        # Step 3: Default language
        defaults = self.config.default_language
        if defaults.enabled:
            target = self._target_language()
            if not target:
                logger.info("No target language set, skipping default resolution", file=descriptor.filename)
            else:
                result.default_language = target
                for kind in defaults.stream_type.kinds:
                    result.defaults_changed += self.resolver.resolve(descriptor.streams_of(kind), target)

        logger.info(
            "Media processed",
            file=descriptor.filename,
            removed=result.removed,
            reordered=result.reordered,
            defaults_changed=result.defaults_changed,
        )
        return result

    def _target_language(self) -> str:
        language = self.config.default_language.language
        if language is None:
            return self.config.original_language or ""
        return self.evaluator.substitute(language)
