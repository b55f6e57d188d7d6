from .interfaces import GitHubEvidenceSource, LinkedInEvidenceSource, RepoFacts, LinkedInFacts
from .github_client import GitHubClient
from .linkedin_client import ProxycurlLinkedInClient

__all__ = [
    'GitHubEvidenceSource',
    'LinkedInEvidenceSource',
    'RepoFacts',
    'LinkedInFacts',
    'GitHubClient',
    'ProxycurlLinkedInClient',
]
