"""Note writer for generating deduplicated meeting notes in a vault folder."""
import logging
from typing import Dict, List, Optional

from botocore.exceptions import ClientError

from processor.attendee_formatter import AttendeeFormatter
from processor.filename_generator import FilenameGenerator
from processor.frontmatter import EVENT_ID_KEY, EVENT_START_KEY, FrontmatterCodec
from processor.models import (
    ConflictPolicy,
    GenerationResult,
    IdentityBlock,
    NormalizedEvent,
    WriteOutcome,
)
from processor.template_renderer import TemplateRenderer
from storage.note_store import NoteStore, basename, join_path

logger = logging.getLogger(__name__)

NOTE_EXISTS_REASON = 'Note for this event already exists'
FILE_EXISTS_REASON = 'File with this name already exists'


class FolderIndex:
    """
    Identities of the notes directly inside one folder.

    Built from a single folder scan and kept current as notes are written,
    so later events in a batch see notes created by earlier ones.
    """

    def __init__(self, identities: Optional[Dict[str, IdentityBlock]] = None):
        self._identities: Dict[str, IdentityBlock] = {}
        # Insertion-ordered paths per identity; the first one wins a lookup
        self._paths: Dict[IdentityBlock, Dict[str, None]] = {}
        for path, identity in (identities or {}).items():
            self.record(path, identity)

    def find(self, target: IdentityBlock) -> Optional[str]:
        """Path of the first note whose identity equals the target."""
        paths = self._paths.get(target)
        if not paths:
            return None
        return next(iter(paths))

    def record(self, path: str, identity: Optional[IdentityBlock]) -> None:
        """Track the identity now stored at a path (None if it has none)."""
        previous = self._identities.get(path)
        if previous == identity:
            return

        if previous is not None:
            del self._identities[path]
            paths = self._paths[previous]
            del paths[path]
            if not paths:
                del self._paths[previous]

        if identity is not None:
            self._identities[path] = identity
            self._paths.setdefault(identity, {})[path] = None

    def __len__(self) -> int:
        return len(self._identities)


class NoteWriter:
    """Writer that turns normalized events into notes in a vault folder."""

    NOTE_EXTENSION = '.md'
    IDENTITY_VARIABLES = [EVENT_ID_KEY, EVENT_START_KEY]

    def __init__(self, store: NoteStore):
        """
        Initialize the note writer.

        Args:
            store: Storage backend holding the vault
        """
        self.store = store
        self.template_renderer = TemplateRenderer()
        self.attendee_formatter = AttendeeFormatter()
        self.filename_generator = FilenameGenerator()
        self.frontmatter = FrontmatterCodec()

    def write_many(
        self,
        events: List[NormalizedEvent],
        template: str,
        folder: str,
        policy: ConflictPolicy
    ) -> GenerationResult:
        """
        Write notes for multiple events, one at a time in input order.

        A failing event is recorded as skipped and the batch continues.

        Args:
            events: Events to write notes for
            template: Template text
            folder: Target folder path
            policy: Conflict resolution policy

        Returns:
            GenerationResult with created filenames and skipped pairs
        """
        logger.info(
            f"Writing notes for {len(events)} events to '{folder}' "
            f"with policy '{ConflictPolicy(policy).value}'"
        )
        result = GenerationResult()
        index = self.scan_folder(folder)

        for event in events:
            try:
                outcome = self.write_one(event, template, folder, policy, index=index)
            except Exception as e:
                filename = self.filename_generator.generate(event.date, event.title)
                logger.error(
                    f"Failed to write note for event '{event.id}': {e}",
                    exc_info=True
                )
                result.skipped.append((filename, str(e)))
                continue

            if outcome.created:
                result.created.append(outcome.filename)
            else:
                result.skipped.append((outcome.filename, outcome.reason))

        logger.info(
            f"Note generation complete: {len(result.created)} created, "
            f"{len(result.skipped)} skipped"
        )
        return result

    def write_one(
        self,
        event: NormalizedEvent,
        template: str,
        folder: str,
        policy: ConflictPolicy,
        index: Optional[FolderIndex] = None
    ) -> WriteOutcome:
        """
        Write a single note for an event.

        Args:
            event: Event to write a note for
            template: Template text
            folder: Target folder path
            policy: Conflict resolution policy
            index: Identity index of the folder (default: scan the folder)

        Returns:
            WriteOutcome describing what happened
        """
        policy = ConflictPolicy(policy)
        identity = IdentityBlock.for_event(event)
        if index is None:
            index = self.scan_folder(folder)

        existing_path = index.find(identity)
        if existing_path:
            if policy is ConflictPolicy.SKIP:
                logger.info(f"Skipping event '{event.id}': note exists at {existing_path}")
                return WriteOutcome(
                    created=False,
                    filename=basename(existing_path),
                    reason=NOTE_EXISTS_REASON
                )
            if policy is ConflictPolicy.OVERWRITE:
                self._modify(existing_path, event, template, identity, index)
                return WriteOutcome(created=True, filename=basename(existing_path))
            # Suffix policy places a new note next to the matched one

        filename = self.filename_generator.generate(event.date, event.title)
        path = join_path(folder, filename)

        if self.store.exists(path):
            if policy is ConflictPolicy.SKIP:
                logger.info(f"Skipping event '{event.id}': {filename} exists")
                return WriteOutcome(
                    created=False,
                    filename=filename,
                    reason=FILE_EXISTS_REASON
                )
            if policy is ConflictPolicy.OVERWRITE:
                self._modify(path, event, template, identity, index)
                return WriteOutcome(created=True, filename=filename)

            suffix = 1
            while self.store.exists(path):
                filename = self.filename_generator.generate_with_suffix(
                    event.date, event.title, suffix
                )
                path = join_path(folder, filename)
                suffix += 1

        content = self.generate_content(event, template, identity)
        self.store.create(path, content)
        index.record(path, self.frontmatter.decode(content))
        logger.info(f"Created note {path}")

        return WriteOutcome(created=True, filename=filename)

    def generate_content(
        self,
        event: NormalizedEvent,
        template: str,
        identity: IdentityBlock
    ) -> str:
        """
        Generate note content from template and event data.

        Templates that reference the identity variables manage their own
        frontmatter; otherwise the identity block is prepended.
        """
        variables = {
            'title': event.title,
            'date': event.date,
            'startTime': event.start_time,
            'endTime': event.end_time,
            'attendees': self.attendee_formatter.format_attendees(event.attendees),
            EVENT_ID_KEY: identity.calendar_event_id,
            EVENT_START_KEY: identity.calendar_event_start,
        }
        body = self.template_renderer.render(template, variables)

        if self.template_renderer.references_any(template, self.IDENTITY_VARIABLES):
            return body
        return self.frontmatter.prepend(identity, body)

    def scan_folder(self, folder: str) -> FolderIndex:
        """Read every note directly inside the folder and index its identity."""
        identities = {}

        for path in self.store.list_children(folder):
            if not path.endswith(self.NOTE_EXTENSION):
                continue

            try:
                content = self.store.read(path)
            except (UnicodeDecodeError, OSError, ClientError) as e:
                logger.warning(f"Could not read {path}, treating it as having no identity: {e}")
                continue

            identity = self.frontmatter.decode(content)
            if identity:
                identities[path] = identity

        logger.debug(f"Indexed {len(identities)} notes in '{folder}'")
        return FolderIndex(identities)

    def _modify(
        self,
        path: str,
        event: NormalizedEvent,
        template: str,
        identity: IdentityBlock,
        index: FolderIndex
    ) -> None:
        content = self.generate_content(event, template, identity)
        self.store.modify(path, content)
        index.record(path, self.frontmatter.decode(content))
        logger.info(f"Overwrote note {path}")
