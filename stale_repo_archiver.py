#!/usr/bin/env python3
"""
Stale Repository Archiver

This script inspects every repository of an organization (or of the
authenticated account) and archives the ones that are stale:
- Repositories whose description contains "DEPRECATED" are always archived
- Repositories with no update, push or meaningful activity event since the
  cutoff (default: 90 days ago) are archived

By default the script runs in dry-run mode and only reports what it would
archive. Pass --apply (or set APPLY) to really archive repositories.

Supported platforms:
- GitHub (via PyGithub)
- GitLab (via python-gitlab)
"""

import argparse
import functools
import logging
import os
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional

import gitlab
import yaml
from github import Auth, Github, GithubException


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    stream=sys.stdout
)
logger = logging.getLogger(__name__)

# "Archived <url>" / "Would archive <url>" records, printed without prefix
record_logger = logging.getLogger(f"{__name__}.records")
record_logger.setLevel(logging.INFO)
record_logger.propagate = False
if not record_logger.handlers:
    _record_handler = logging.StreamHandler(sys.stdout)
    _record_handler.setFormatter(logging.Formatter('%(message)s'))
    record_logger.addHandler(_record_handler)


DEFAULT_PLATFORM = 'github'
DEFAULT_CUTOFF_DAYS = 90
MAX_CUTOFF_DAYS = 36500
DEFAULT_MODE = 'org'
DEFAULT_MAX_WORKERS = 8
MAX_WORKERS_LIMIT = 32
DEFAULT_QUEUE_SIZE = 32
DEFAULT_GITLAB_URL = 'https://gitlab.com'

# Number of events requested from the activity feed (first page only)
EVENTS_PAGE_SIZE = 30

# https://docs.github.com/en/rest/using-the-rest-api/github-event-types
GITHUB_IGNORED_EVENTS = frozenset({'ForkEvent', 'StarEvent', 'WatchEvent'})
GITLAB_IGNORED_EVENTS = frozenset({'joined', 'left'})

DEPRECATED_MARKER = 'deprecated'

SUPPORTED_PLATFORMS = ('github', 'gitlab')
SUPPORTED_MODES = ('org', 'owned')

OUTCOME_ARCHIVED = 'archived'
OUTCOME_WOULD_ARCHIVE = 'would_archive'
OUTCOME_ACTIVE = 'active'
OUTCOME_INCONCLUSIVE = 'inconclusive'
OUTCOME_FAILED = 'failed'

FALSE_VALUES = ('', '0', 'false', 'no', 'off')


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing required fields."""


class EventFetchError(Exception):
    """Raised when the activity feed of a repository cannot be fetched."""


class RepositoryUpdateError(Exception):
    """Raised when archiving a repository fails."""


class MalformedTimestampError(ValueError):
    """Raised when a timestamp does not follow the ISO 8601 profile."""


@dataclass
class PlatformClient:
    """An authenticated platform client shared by every evaluation of a run."""

    name: str
    client: object
    ignored_events: frozenset


# =============================================================================
# Configuration
# =============================================================================


def parse_bool(value) -> bool:
    """Interpret a flag given as a string (environment/YAML) or a bool."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() not in FALSE_VALUES


def _get_bounded_int(config: dict, key: str, default: int,
                     minimum: int, maximum: Optional[int] = None) -> int:
    """
    Read an integer pool setting, falling back to the default when it isn't
    a number and clamping it into [minimum, maximum] otherwise.
    """
    raw_value = config.get(key, default)
    try:
        value = int(raw_value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid '{key}' value {raw_value!r}; using {default}")
        return default

    clamped = max(value, minimum)
    if maximum is not None:
        clamped = min(clamped, maximum)
    if clamped != value:
        logger.warning(f"'{key}' value {value} is out of range; using {clamped}")
    return clamped


def get_validated_max_workers(config: dict) -> int:
    """Get the number of repositories evaluated concurrently (1-32)."""
    return _get_bounded_int(config, 'max_workers', DEFAULT_MAX_WORKERS, 1, MAX_WORKERS_LIMIT)


def get_validated_queue_size(config: dict) -> int:
    """Get the number of evaluations allowed to wait for a free worker."""
    return _get_bounded_int(config, 'queue_size', DEFAULT_QUEUE_SIZE, 0)


def validate_config(config: dict) -> None:
    """
    Validate that all required configuration keys are present.

    When platform is 'github' (default), requires a token in the 'github'
    section. When platform is 'gitlab', requires a private token in the
    'gitlab' section. Organization mode additionally requires 'org'.

    Args:
        config: Configuration dictionary to validate

    Raises:
        ConfigurationError: If required keys are missing or invalid
    """
    if not config:
        raise ConfigurationError("Configuration is empty")

    platform = config.get('platform', DEFAULT_PLATFORM)
    if platform not in SUPPORTED_PLATFORMS:
        raise ConfigurationError(
            f"Unsupported platform: '{platform}'. Must be 'github' or 'gitlab'."
        )

    if platform == 'github':
        if not (config.get('github') or {}).get('token'):
            raise ConfigurationError(
                "Missing GitHub token. Set AUTH_TOKEN or 'github.token' in the configuration."
            )
    else:
        if not (config.get('gitlab') or {}).get('private_token'):
            raise ConfigurationError(
                "Missing GitLab token. Set AUTH_TOKEN or 'gitlab.private_token' in the configuration."
            )

    mode = config.get('mode', DEFAULT_MODE)
    if mode not in SUPPORTED_MODES:
        raise ConfigurationError(
            f"Unsupported mode: '{mode}'. Must be 'org' or 'owned'."
        )

    if mode == 'org' and not config.get('org'):
        raise ConfigurationError(
            "Missing organization. Set ORG, pass --org or use --all-owned."
        )

    cutoff_days = config.get('cutoff_days', DEFAULT_CUTOFF_DAYS)
    try:
        cutoff_days = int(cutoff_days)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Invalid 'cutoff_days' value {cutoff_days!r}; must be an integer"
        )
    if cutoff_days < 0 or cutoff_days > MAX_CUTOFF_DAYS:
        raise ConfigurationError(
            f"Invalid 'cutoff_days' value {cutoff_days}; must be between 0 and {MAX_CUTOFF_DAYS}"
        )
    config['cutoff_days'] = cutoff_days


def apply_environment(config: dict, environ, platform: Optional[str] = None) -> dict:
    """
    Overlay environment variables onto a configuration dictionary.

    Recognized variables: AUTH_TOKEN (or GITHUB_TOKEN), ORG, CUTOFF_DAYS,
    APPLY (or FOR_REAL), PLATFORM and API_URL. The token and API URL are
    stored in the section of the selected platform; an explicit platform
    argument wins over PLATFORM.
    """
    if platform:
        config['platform'] = platform
    elif environ.get('PLATFORM'):
        config['platform'] = environ['PLATFORM'].strip().lower()
    platform = config.get('platform', DEFAULT_PLATFORM)

    token = environ.get('AUTH_TOKEN') or environ.get('GITHUB_TOKEN')
    if token:
        if platform == 'gitlab':
            config.setdefault('gitlab', {})['private_token'] = token
        else:
            config.setdefault('github', {})['token'] = token

    if environ.get('API_URL'):
        if platform == 'gitlab':
            config.setdefault('gitlab', {})['url'] = environ['API_URL']
        else:
            config.setdefault('github', {})['api_url'] = environ['API_URL']

    if environ.get('ORG'):
        config['org'] = environ['ORG']

    if environ.get('CUTOFF_DAYS'):
        config['cutoff_days'] = environ['CUTOFF_DAYS']

    for key in ('APPLY', 'FOR_REAL'):
        if key in environ:
            config['apply'] = parse_bool(environ[key])
            break

    return config


def load_config(config_path: Optional[str] = None, environ=None,
                platform: Optional[str] = None) -> dict:
    """
    Load configuration from an optional YAML file and the environment.

    Environment variables take precedence over the YAML file. The result is
    not validated yet, as command line flags may still override it.
    """
    config = {}
    if config_path:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
    if environ is None:
        environ = os.environ
    return apply_environment(config, environ, platform)


def create_github_client(config: dict) -> Github:
    """
    Create and authenticate a GitHub client.

    Args:
        config: Configuration dictionary with 'github' section

    Returns:
        Authenticated PyGithub Github client

    Raises:
        ConfigurationError: If authentication fails
    """
    token = config['github']['token']
    api_url = config['github'].get('api_url')
    try:
        if api_url:
            gh = Github(auth=Auth.Token(token), base_url=api_url)
        else:
            gh = Github(auth=Auth.Token(token))
        # Verify authentication by fetching the authenticated user
        gh.get_user().login
    except GithubException as e:
        raise ConfigurationError(f"Failed to authenticate with GitHub: {e}") from e
    return gh


def create_gitlab_client(config: dict) -> gitlab.Gitlab:
    """Create and authenticate a GitLab client."""
    gl = gitlab.Gitlab(
        url=config['gitlab'].get('url', DEFAULT_GITLAB_URL),
        private_token=config['gitlab']['private_token']
    )
    try:
        gl.auth()
    except gitlab.exceptions.GitlabAuthenticationError as e:
        raise ConfigurationError(f"Failed to authenticate with GitLab: {e}") from e
    return gl


def create_platform(config: dict) -> PlatformClient:
    """Create the platform client for the configured platform."""
    platform = config.get('platform', DEFAULT_PLATFORM)
    if platform == 'gitlab':
        client = create_gitlab_client(config)
        default_ignored = GITLAB_IGNORED_EVENTS
    else:
        client = create_github_client(config)
        default_ignored = GITHUB_IGNORED_EVENTS

    ignored_events = config.get('ignored_events')
    if ignored_events is None:
        ignored_events = default_ignored
    return PlatformClient(
        name=platform,
        client=client,
        ignored_events=frozenset(ignored_events)
    )


# =============================================================================
# Timestamps
# =============================================================================


def parse_timestamp(value) -> datetime:
    """
    Parse a timestamp into a timezone-aware datetime object.

    Accepts datetime objects (as returned by PyGithub) and ISO 8601 strings
    (as returned by the GitLab and GitHub REST APIs). Naive values are
    assumed to be UTC.

    Args:
        value: datetime object or date string in ISO 8601 format

    Returns:
        datetime object with timezone info

    Raises:
        MalformedTimestampError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        date_str = value.strip()
        # Handle 'Z' suffix (UTC)
        if date_str.endswith('Z'):
            date_str = date_str[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(date_str)
        except ValueError:
            formats = [
                '%Y-%m-%dT%H:%M:%S%z',
                '%Y-%m-%dT%H:%M:%S.%f%z',
                '%Y-%m-%d %H:%M:%S%z',
            ]
            for fmt in formats:
                try:
                    parsed = datetime.strptime(date_str, fmt)
                    break
                except ValueError:
                    continue
            else:
                raise MalformedTimestampError(f"Unable to parse date: {value}")
    else:
        raise MalformedTimestampError(f"Unable to parse date: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def compute_cutoff(cutoff_days: int, now: Optional[datetime] = None) -> datetime:
    """Return the instant before which activity no longer counts as recent."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now - timedelta(days=cutoff_days)


def is_after(value, cutoff: datetime) -> bool:
    """Check whether a timestamp lies strictly after the cutoff."""
    if value is None:
        return False
    return parse_timestamp(value) > cutoff


# =============================================================================
# Repository Source
# =============================================================================


def _build_github_repo_info_dict(repo) -> dict:
    """
    Build a standardized repository info dictionary from a GitHub repository.

    Args:
        repo: GitHub Repository object

    Returns:
        Dictionary with repository information
    """
    return {
        'id': repo.id,
        'owner': repo.owner.login,
        'name': repo.name,
        'full_name': repo.full_name,
        'html_url': repo.html_url,
        'description': repo.description,
        'archived': bool(repo.archived),
        'fork': bool(repo.fork),
        'updated_at': repo.updated_at,
        'pushed_at': repo.pushed_at,
    }


def _build_gitlab_project_info_dict(project) -> dict:
    """
    Build a standardized repository info dictionary from a GitLab project.

    GitLab has no separate push timestamp, so 'pushed_at' is taken from
    last_activity_at. Older GitLab versions don't return updated_at at all.
    """
    namespace = getattr(project, 'namespace', None) or {}
    last_activity = getattr(project, 'last_activity_at', None)
    return {
        'id': project.id,
        'owner': namespace.get('full_path', ''),
        'name': project.path,
        'full_name': project.path_with_namespace,
        'html_url': project.web_url,
        'description': getattr(project, 'description', None),
        'archived': bool(getattr(project, 'archived', False)),
        'fork': getattr(project, 'forked_from_project', None) is not None,
        'updated_at': getattr(project, 'updated_at', None) or last_activity,
        'pushed_at': last_activity,
    }


def github_build_search_query(org: str, include_forks: bool = False) -> str:
    """Build the repository search query for an organization or user."""
    query = f"user:{org} archived:false"
    if include_forks:
        query += " fork:true"
    return query


def github_search_repos(gh, org: str, include_forks: bool = False) -> Iterator[dict]:
    """
    Yield the non-archived repositories of an organization or user on GitHub.

    Results are paginated lazily by PyGithub; errors while fetching a page
    propagate to the caller.
    """
    query = github_build_search_query(org, include_forks)
    logger.debug(f"Searching GitHub repositories: {query}")
    for repo in gh.search_repositories(query=query):
        yield _build_github_repo_info_dict(repo)


def github_list_owned_repos(gh) -> Iterator[dict]:
    """Yield the repositories owned by the authenticated GitHub account."""
    for repo in gh.get_user().get_repos(affiliation='owner'):
        yield _build_github_repo_info_dict(repo)


def gitlab_list_group_projects(gl: gitlab.Gitlab, group_path: str,
                               include_forks: bool = False) -> Iterator[dict]:
    """
    Yield the non-archived projects of a GitLab group, subgroups included.

    Forked projects are skipped unless include_forks is set.
    """
    group = gl.groups.get(group_path)
    projects = group.projects.list(
        iterator=True,
        archived=False,
        include_subgroups=True
    )
    for project in projects:
        project_info = _build_gitlab_project_info_dict(project)
        if project_info['fork'] and not include_forks:
            logger.debug(f"Skipping forked project: {project_info['full_name']}")
            continue
        yield project_info


def gitlab_list_owned_projects(gl: gitlab.Gitlab) -> Iterator[dict]:
    """Yield every project owned by the authenticated GitLab user."""
    for project in gl.projects.list(iterator=True, owned=True):
        yield _build_gitlab_project_info_dict(project)


def iter_candidate_repos(platform: PlatformClient, config: dict) -> Iterator[dict]:
    """
    Yield the repositories to evaluate for the configured platform and mode.

    In 'owned' mode the listing includes archived repositories, which are
    skipped here so they are never archived twice.
    """
    mode = config.get('mode', DEFAULT_MODE)
    include_forks = parse_bool(config.get('include_forks', False))

    if mode == 'owned':
        if platform.name == 'gitlab':
            repos = gitlab_list_owned_projects(platform.client)
        else:
            repos = github_list_owned_repos(platform.client)
        for repo_info in repos:
            if repo_info['archived']:
                logger.debug(f"Skipping already archived repository: {repo_info['html_url']}")
                continue
            yield repo_info
        return

    if platform.name == 'gitlab':
        yield from gitlab_list_group_projects(platform.client, config['org'], include_forks)
    else:
        yield from github_search_repos(platform.client, config['org'], include_forks)


# =============================================================================
# Staleness Evaluation
# =============================================================================


def github_list_repo_events(gh, repo_info: dict) -> list:
    """Get the first page of a GitHub repository's events, newest first."""
    try:
        repo = gh.get_repo(repo_info['full_name'], lazy=True)
        events = repo.get_events().get_page(0)
        return [
            {'type': event.type, 'created_at': event.created_at}
            for event in events
        ]
    except GithubException as e:
        raise EventFetchError(
            f"Error fetching events for {repo_info['full_name']}: {e}"
        ) from e


def gitlab_list_repo_events(gl: gitlab.Gitlab, repo_info: dict) -> list:
    """Get the most recent events of a GitLab project, newest first."""
    try:
        project = gl.projects.get(repo_info['id'], lazy=True)
        events = project.events.list(
            get_all=False,
            per_page=EVENTS_PAGE_SIZE,
            sort='desc'
        )
        return [
            {'type': event.action_name, 'created_at': event.created_at}
            for event in events
        ]
    except gitlab.exceptions.GitlabError as e:
        raise EventFetchError(
            f"Error fetching events for {repo_info['full_name']}: {e}"
        ) from e


def list_repo_events(platform: PlatformClient, repo_info: dict) -> list:
    """
    Get the recent activity events of a repository, newest first.

    Raises:
        EventFetchError: If the activity feed could not be fetched
    """
    if platform.name == 'gitlab':
        return gitlab_list_repo_events(platform.client, repo_info)
    return github_list_repo_events(platform.client, repo_info)


def get_latest_event(platform: PlatformClient, repo_info: dict) -> Optional[dict]:
    """
    Get the most recent event that isn't one of the ignored event types.

    Returns None when the feed holds only ignored events or no events at all.
    A failed fetch raises EventFetchError instead.
    """
    for event in list_repo_events(platform, repo_info):
        if event['type'] not in platform.ignored_events:
            return event
    return None


def updated_since(platform: PlatformClient, repo_info: dict, cutoff: datetime) -> bool:
    """
    Check whether anything has happened with the repository since the cutoff.

    The repository's own timestamps are checked first; the activity feed is
    only fetched when neither of them is recent.
    """
    if is_after(repo_info.get('updated_at'), cutoff):
        return True

    if is_after(repo_info.get('pushed_at'), cutoff):
        return True

    latest_event = get_latest_event(platform, repo_info)
    if latest_event and is_after(latest_event['created_at'], cutoff):
        return True

    return False


def is_deprecated(repo_info: dict) -> bool:
    """Check whether the description marks the repository as deprecated."""
    description = repo_info.get('description') or ''
    return DEPRECATED_MARKER in description.lower()


def should_be_archived(platform: PlatformClient, repo_info: dict, cutoff: datetime) -> bool:
    """
    Decide whether a repository is stale.

    Deprecated repositories are always stale. Any other repository is stale
    if nothing happened with it since the cutoff.

    Raises:
        EventFetchError: If the activity feed was needed but couldn't be fetched
        MalformedTimestampError: If a timestamp of the repository is malformed
    """
    if is_deprecated(repo_info):
        return True

    return not updated_since(platform, repo_info, cutoff)


# =============================================================================
# Archiving
# =============================================================================


def archive_repo(platform: PlatformClient, repo_info: dict) -> None:
    """
    Archive a repository on the platform.

    Raises:
        RepositoryUpdateError: If the platform rejected the update
    """
    if platform.name == 'gitlab':
        try:
            platform.client.projects.get(repo_info['id'], lazy=True).archive()
        except gitlab.exceptions.GitlabError as e:
            raise RepositoryUpdateError(
                f"Error archiving project {repo_info['full_name']}: {e}"
            ) from e
        return

    try:
        platform.client.get_repo(repo_info['full_name'], lazy=True).edit(archived=True)
    except GithubException as e:
        raise RepositoryUpdateError(
            f"Error archiving repo {repo_info['full_name']}: {e}"
        ) from e


def archive_if_stale(platform: PlatformClient, repo_info: dict,
                     cutoff: datetime, apply: bool = False) -> str:
    """
    Evaluate a single repository and archive it if it is stale.

    Args:
        platform: Authenticated platform client
        repo_info: Repository info dictionary
        cutoff: Instant before which activity no longer counts
        apply: If False, only report what would be archived

    Returns:
        The outcome of the evaluation (one of the OUTCOME_* constants)
    """
    url = repo_info['html_url']
    try:
        archive = should_be_archived(platform, repo_info, cutoff)
    except EventFetchError as e:
        logger.warning(f"Could not determine activity of {url}, leaving it untouched: {e}")
        return OUTCOME_INCONCLUSIVE
    except MalformedTimestampError as e:
        logger.warning(f"Malformed timestamp on {url}, leaving it untouched: {e}")
        return OUTCOME_INCONCLUSIVE

    if not archive:
        logger.debug(f"Repository is active: {url}")
        return OUTCOME_ACTIVE

    if not apply:
        record_logger.info(f"Would archive {url}")
        return OUTCOME_WOULD_ARCHIVE

    try:
        archive_repo(platform, repo_info)
    except RepositoryUpdateError as e:
        logger.error(f"Failed to archive {url}: {e}")
        return OUTCOME_FAILED

    record_logger.info(f"Archived {url}")
    return OUTCOME_ARCHIVED


# =============================================================================
# Scan
# =============================================================================


class BoundedExecutor:
    """
    A thread pool whose task queue has a fixed size.

    submit() blocks once max_workers tasks are running and queue_size tasks
    are waiting, so the producer can't run arbitrarily far ahead of the
    workers.
    """

    def __init__(self, max_workers: int, queue_size: int = DEFAULT_QUEUE_SIZE):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix='archiver'
        )
        self._slots = threading.BoundedSemaphore(max_workers + queue_size)

    def submit(self, fn, *args, **kwargs):
        self._slots.acquire()
        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except BaseException:
            self._slots.release()
            raise
        future.add_done_callback(lambda _: self._slots.release())
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown(wait=True)
        return False


def _record_outcome(summary: dict, lock: threading.Lock, repo_info: dict, future) -> None:
    """Add the outcome of a finished evaluation to the run summary."""
    try:
        outcome = future.result()
    except Exception as e:
        logger.error(f"Error evaluating repo {repo_info['html_url']}: {e}")
        outcome = OUTCOME_FAILED

    with lock:
        summary['total_scanned'] += 1
        summary[outcome] += 1
        if outcome in (OUTCOME_ARCHIVED, OUTCOME_WOULD_ARCHIVE):
            summary['archived_repos'].append(repo_info['html_url'])
        elif outcome in (OUTCOME_INCONCLUSIVE, OUTCOME_FAILED):
            summary['skipped_repos'].append({
                'url': repo_info['html_url'],
                'outcome': outcome,
            })


def archive_stale_repos(platform: PlatformClient, config: dict) -> dict:
    """
    Scan all candidate repositories and archive the stale ones.

    Repositories are evaluated concurrently by a bounded worker pool while
    the listing keeps paginating. A failure evaluating one repository never
    stops the others; a failure of the listing itself propagates once the
    evaluations already started have finished.

    Args:
        platform: Authenticated platform client
        config: Validated configuration dictionary

    Returns:
        Summary of the scan
    """
    cutoff_days = config.get('cutoff_days', DEFAULT_CUTOFF_DAYS)
    cutoff = compute_cutoff(cutoff_days)
    apply = parse_bool(config.get('apply', False))
    max_workers = get_validated_max_workers(config)
    queue_size = get_validated_queue_size(config)

    summary = {
        'total_scanned': 0,
        OUTCOME_ARCHIVED: 0,
        OUTCOME_WOULD_ARCHIVE: 0,
        OUTCOME_ACTIVE: 0,
        OUTCOME_INCONCLUSIVE: 0,
        OUTCOME_FAILED: 0,
        'archived_repos': [],
        'skipped_repos': [],
        'cutoff': cutoff,
        'cutoff_days': cutoff_days,
        'apply': apply,
    }

    logger.info(
        f"Looking for repositories without activity since {cutoff:%Y-%m-%d %H:%M:%S} UTC "
        f"({cutoff_days} days)"
    )

    # Record each outcome when its evaluation finishes; finished futures are not kept
    lock = threading.Lock()
    with BoundedExecutor(max_workers, queue_size) as executor:
        for repo_info in iter_candidate_repos(platform, config):
            future = executor.submit(archive_if_stale, platform, repo_info, cutoff, apply)
            future.add_done_callback(
                functools.partial(_record_outcome, summary, lock, repo_info)
            )

    return summary


def main() -> Optional[int]:
    """Main entry point for the script."""
    parser = argparse.ArgumentParser(
        description='Archive repositories without recent activity or marked as '
                    'DEPRECATED. Supports both GitHub and GitLab platforms.'
    )
    parser.add_argument(
        '-c', '--config',
        default=None,
        help='Path to an optional YAML configuration file'
    )
    parser.add_argument(
        '--org',
        help='Organization, user or group whose repositories are scanned (default: $ORG)'
    )
    parser.add_argument(
        '--all-owned',
        action='store_true',
        help='Scan every repository owned by the authenticated account instead of an organization'
    )
    parser.add_argument(
        '--include-forks',
        action='store_true',
        help='Also consider forked repositories'
    )
    parser.add_argument(
        '--cutoff-days',
        type=int,
        help=f'Number of days without activity after which a repository is stale '
             f'(default: $CUTOFF_DAYS or {DEFAULT_CUTOFF_DAYS})'
    )
    parser.add_argument(
        '--platform',
        choices=SUPPORTED_PLATFORMS,
        help=f'Platform hosting the repositories (default: $PLATFORM or {DEFAULT_PLATFORM})'
    )
    parser.add_argument(
        '--max-workers',
        type=int,
        help=f'Number of repositories evaluated concurrently (default: {DEFAULT_MAX_WORKERS})'
    )
    parser.add_argument(
        '--apply',
        action='store_true',
        help='Really archive stale repositories. Without this flag (or $APPLY) '
             'the script only reports what it would archive.'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = load_config(args.config, platform=args.platform)
    except FileNotFoundError:
        logger.error(f"Configuration file not found: {args.config}")
        return 1
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in configuration file: {e}")
        return 1

    if args.org:
        config['org'] = args.org
    if args.all_owned:
        config['mode'] = 'owned'
    if args.include_forks:
        config['include_forks'] = True
    if args.cutoff_days is not None:
        config['cutoff_days'] = args.cutoff_days
    if args.max_workers is not None:
        config['max_workers'] = args.max_workers
    if args.apply:
        config['apply'] = True

    try:
        validate_config(config)
        platform = create_platform(config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        summary = archive_stale_repos(platform, config)
    except (GithubException, gitlab.exceptions.GitlabError) as e:
        logger.error(f"Failed to list repositories: {e}")
        return 1

    logger.info("=" * 50)
    logger.info("Stale Repository Archiving Summary")
    logger.info("=" * 50)
    if not summary['apply']:
        logger.info("Dry run: no repository was modified (use --apply to archive)")
    logger.info(f"Repositories scanned: {summary['total_scanned']}")
    logger.info(f"Repositories archived: {summary[OUTCOME_ARCHIVED]}")
    logger.info(f"Repositories that would be archived: {summary[OUTCOME_WOULD_ARCHIVE]}")
    logger.info(f"Repositories still active: {summary[OUTCOME_ACTIVE]}")
    logger.info(f"Repositories skipped (activity unknown): {summary[OUTCOME_INCONCLUSIVE]}")
    logger.info(f"Repositories failed: {summary[OUTCOME_FAILED]}")

    if summary['skipped_repos']:
        logger.warning("Skipped repositories:")
        for item in summary['skipped_repos']:
            logger.warning(f"  - {item['url']} ({item['outcome']})")

    return 0


if __name__ == '__main__':
    sys.exit(main())
