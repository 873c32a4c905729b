"""
Tests for the intent resolution orchestrator.

Strategies and the CMS client are mocked; the executor and handler table
are real.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from wp_intent_gateway.classifier import IntentClassifier
from wp_intent_gateway.config import AIConfig, GatewayConfig, ResolutionConfig
from wp_intent_gateway.errors import ResolutionError, UpstreamError
from wp_intent_gateway.executor import OperationExecutor
from wp_intent_gateway.models import (
    Action,
    ClassifierOutput,
    ExtractionResult,
    IntentOperation,
    RestOperation,
    SiteCredentials,
)
from wp_intent_gateway.orchestrator import Orchestrator

CREDENTIALS = SiteCredentials(url="https://blog.test", username="admin", app_password="abcd efgh")


@pytest.fixture(scope="module")
def trained_classifier():
    clf = IntentClassifier()
    clf.train()
    return clf


@pytest.fixture
def client():
    mock = AsyncMock()
    mock.__aenter__.return_value = mock
    mock.__aexit__.return_value = False
    mock.authenticate.return_value = True
    mock.request.return_value = {"id": 1}
    return mock


@pytest.fixture
def factory(client):
    return MagicMock(return_value=client)


def make_extractor(result=None, available=True):
    extractor = MagicMock()
    extractor.is_available.return_value = available
    extractor.extract = AsyncMock(return_value=result)
    return extractor


def make_orchestrator(extractor, classifier, factory, order=("llm", "classifier"), fallback=False, threshold=0.7):
    config = GatewayConfig(
        site=CREDENTIALS,
        ai=AIConfig(provider="anthropic"),
        resolution=ResolutionConfig(strategy_order=order, fallback_on_failure=fallback, confidence_threshold=threshold),
    )
    return Orchestrator(config, extractor, classifier, OperationExecutor(), client_factory=factory)


class TestShortCircuit:
    """Literal commands never reach credentials, strategies or the client."""

    @pytest.mark.parametrize("text", ["test", "echo hello"])
    @pytest.mark.asyncio
    async def test_no_site_contact(self, text, factory):
        extractor = make_extractor()
        classifier = MagicMock()
        orch = make_orchestrator(extractor, classifier, factory)

        result = await orch.process(text, None)

        assert result.success is True
        assert result.output == f"Test réussi! Echo: {text}"
        factory.assert_not_called()
        extractor.extract.assert_not_called()
        classifier.classify.assert_not_called()


class TestCredentialGate:
    """Incomplete credentials stop the request before resolution."""

    @pytest.mark.asyncio
    async def test_url_without_username_or_password(self, factory):
        extractor = make_extractor()
        classifier = MagicMock()
        orch = make_orchestrator(extractor, classifier, factory)

        result = await orch.process("list posts", SiteCredentials(url="https://blog.test"), from_request=True)

        assert result.success is False
        assert result.code == "configuration_error"
        assert result.status_code == 400
        assert extractor.extract.await_count == 0
        assert classifier.classify.call_count == 0
        assert factory.call_count == 0

    @pytest.mark.asyncio
    async def test_placeholder_url_from_defaults(self, factory):
        extractor = make_extractor()
        orch = make_orchestrator(extractor, MagicMock(), factory)
        creds = SiteCredentials(url="https://example.com", username="admin", password="secret")

        result = await orch.process("list posts", creds)

        assert result.code == "configuration_error"
        assert result.status_code == 500
        assert extractor.extract.await_count == 0

    @pytest.mark.asyncio
    async def test_no_credentials(self, factory):
        orch = make_orchestrator(make_extractor(), MagicMock(), factory)
        result = await orch.process("list posts", None)
        assert result.code == "configuration_error"
        assert result.suggestions

    @pytest.mark.asyncio
    async def test_authentication_failure(self, client, factory):
        client.authenticate.return_value = False
        extractor = make_extractor()
        orch = make_orchestrator(extractor, MagicMock(), factory)

        result = await orch.process("list posts", CREDENTIALS)

        assert result.code == "auth_failed"
        assert result.status_code == 401
        assert extractor.extract.await_count == 0
        client.__aexit__.assert_awaited_once()


class TestGenerativePath:
    """Test the model-first path."""

    @pytest.mark.asyncio
    async def test_list_posts(self, client, factory):
        extractor = make_extractor(ExtractionResult(success=True, method="GET", endpoint="posts", params={}))
        classifier = MagicMock()
        orch = make_orchestrator(extractor, classifier, factory)

        result = await orch.process("Show me all the posts", CREDENTIALS)

        assert result.success is True
        assert result.strategy == "llm"
        assert result.interpretation == 'GET request to endpoint "posts"'
        client.request.assert_awaited_once_with("get", "posts", {}, {})
        classifier.classify.assert_not_called()

    @pytest.mark.asyncio
    async def test_publish_status_added(self, client, factory):
        extractor = make_extractor(
            ExtractionResult(
                success=True,
                method="POST",
                endpoint="posts",
                data={"title": "Hello World", "content": "This is my first post"},
            )
        )
        orch = make_orchestrator(extractor, MagicMock(), factory)

        result = await orch.process(
            "Create a new post called 'Hello World' with content 'This is my first post'", CREDENTIALS
        )

        assert result.success is True
        method, endpoint, data, params = client.request.call_args.args
        assert (method, endpoint) == ("post", "posts")
        assert data == {"title": "Hello World", "content": "This is my first post", "status": "publish"}

    @pytest.mark.asyncio
    async def test_result_embedded_in_output(self, client, factory):
        client.request.return_value = [{"id": 7, "title": "Été"}]
        extractor = make_extractor(ExtractionResult(success=True, method="GET", endpoint="posts"))
        orch = make_orchestrator(extractor, MagicMock(), factory)

        result = await orch.process("list posts", CREDENTIALS)

        assert result.result == [{"id": 7, "title": "Été"}]
        assert '"title": "Été"' in result.output

    @pytest.mark.asyncio
    async def test_model_failure_does_not_fall_back(self, client, factory):
        extractor = make_extractor(ExtractionResult(success=False, error="AI processing failed: timeout"))
        classifier = MagicMock()
        orch = make_orchestrator(extractor, classifier, factory)

        result = await orch.process("list posts", CREDENTIALS)

        assert result.success is False
        assert result.code == "resolution_failed"
        assert "timeout" in result.error
        assert result.query == "list posts"
        classifier.classify.assert_not_called()
        client.request.assert_not_called()
        client.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_model_failure_falls_back_when_enabled(self, client, factory, trained_classifier):
        extractor = make_extractor(ExtractionResult(success=False, error="AI processing failed: timeout"))
        orch = make_orchestrator(extractor, trained_classifier, factory, fallback=True)

        result = await orch.process("list posts", CREDENTIALS)

        assert result.success is True
        assert result.strategy == "classifier"
        client.get_posts.assert_awaited_once_with({})

    @pytest.mark.asyncio
    async def test_custom_endpoint_not_forwarded(self, client, factory):
        extractor = make_extractor(
            ExtractionResult(success=True, method="POST", endpoint="seo_analysis", data={"url": "https://blog.test"})
        )
        orch = make_orchestrator(extractor, MagicMock(), factory)

        result = await orch.process("analyse the SEO of my homepage", CREDENTIALS)

        assert result.success is True
        assert result.result["message"] == "SEO analysis performed for https://blog.test"
        client.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_without_id_not_forwarded(self, client, factory):
        extractor = make_extractor(ExtractionResult(success=True, method="DELETE", endpoint="posts"))
        orch = make_orchestrator(extractor, MagicMock(), factory)

        result = await orch.process("delete the post", CREDENTIALS)

        assert result.success is False
        assert result.code == "execution_failed"
        assert "ID is required" in result.error
        client.request.assert_not_called()


class TestClassifierPath:
    """Test the local classifier path used when no provider is configured."""

    @pytest.mark.asyncio
    async def test_skips_unavailable_model(self, client, factory, trained_classifier):
        extractor = make_extractor(available=False)
        orch = make_orchestrator(extractor, trained_classifier, factory)

        result = await orch.process("delete post 42", CREDENTIALS)

        assert result.success is True
        assert result.strategy == "classifier"
        assert result.interpretation == "DELETE operation on posts"
        extractor.extract.assert_not_called()
        client.delete_post.assert_awaited_once_with("42")

    @pytest.mark.asyncio
    async def test_low_confidence_is_not_guessed(self, client, factory):
        classifier = MagicMock()
        classifier.classify.return_value = ClassifierOutput(label="wpapi.posts.delete", score=0.4, entities={"id": "1"})
        orch = make_orchestrator(make_extractor(available=False), classifier, factory)

        result = await orch.process("maybe remove something", CREDENTIALS)

        assert result.success is False
        assert result.code == "resolution_failed"
        assert result.suggestions
        client.delete_post.assert_not_called()

    @pytest.mark.asyncio
    async def test_threshold_is_configurable(self, client, factory):
        classifier = MagicMock()
        classifier.classify.return_value = ClassifierOutput(label="wpapi.posts.get", score=0.5)
        orch = make_orchestrator(make_extractor(available=False), classifier, factory, threshold=0.4)

        result = await orch.process("posts please", CREDENTIALS)

        assert result.success is True
        client.get_posts.assert_awaited_once_with({})

    @pytest.mark.asyncio
    async def test_delete_without_id(self, client, factory):
        classifier = MagicMock()
        classifier.classify.return_value = ClassifierOutput(label="wpapi.posts.delete", score=0.9)
        orch = make_orchestrator(make_extractor(available=False), classifier, factory)

        result = await orch.process("delete the post", CREDENTIALS)

        assert result.success is False
        assert result.code == "execution_failed"
        assert result.status_code == 400
        client.delete_post.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_label(self, client, factory):
        classifier = MagicMock()
        classifier.classify.return_value = ClassifierOutput(label="posts.delete", score=0.95)
        orch = make_orchestrator(make_extractor(available=False), classifier, factory)

        result = await orch.process("delete post 3", CREDENTIALS)

        assert result.code == "resolution_failed"


class TestResolve:
    """Test strategy ordering without execution."""

    @pytest.mark.asyncio
    async def test_regex_strategy(self, factory):
        orch = make_orchestrator(make_extractor(), MagicMock(), factory, order=("regex",))
        resolution = await orch.resolve("liste les articles")
        assert resolution.strategy == "regex"
        assert resolution.operation == RestOperation(method="GET", endpoint="posts")

    @pytest.mark.asyncio
    async def test_regex_no_match(self, factory):
        orch = make_orchestrator(make_extractor(), MagicMock(), factory, order=("regex",))
        with pytest.raises(ResolutionError):
            await orch.resolve("bonjour")

    @pytest.mark.asyncio
    async def test_classifier_before_regex(self, factory, trained_classifier):
        orch = make_orchestrator(make_extractor(), trained_classifier, factory, order=("classifier", "regex"), fallback=True)
        resolution = await orch.resolve("liste les articles")
        assert resolution.strategy == "regex"

    @pytest.mark.asyncio
    async def test_classifier_intent(self, factory, trained_classifier):
        orch = make_orchestrator(make_extractor(available=False), trained_classifier, factory)
        resolution = await orch.resolve("activate plugin akismet")
        assert resolution.operation == IntentOperation(
            resource="plugins", action=Action.ACTIVATE, entities={"plugin": "akismet"}
        )

    @pytest.mark.asyncio
    async def test_nothing_available(self, factory):
        orch = make_orchestrator(make_extractor(available=False), MagicMock(), factory, order=("llm",))
        with pytest.raises(ResolutionError, match="no resolution strategy"):
            await orch.resolve("list posts")


class TestSimpleCommandTransform:
    """Test the regex-only transform path."""

    def test_creation(self, factory):
        classifier = MagicMock()
        extractor = make_extractor()
        orch = make_orchestrator(extractor, classifier, factory)

        op = orch.transform_simple_command("crée un article intitulé 'Mon titre' avec le contenu 'Mon texte'")

        assert op.method.lower() == "post"
        assert op.endpoint == "posts"
        assert op.data == {"title": "Mon titre", "content": "Mon texte", "status": "publish"}
        classifier.classify.assert_not_called()
        extractor.extract.assert_not_called()

    def test_no_match(self, factory):
        orch = make_orchestrator(make_extractor(), MagicMock(), factory)
        assert orch.transform_simple_command("hello there") is None


class TestFailureHandling:
    """Errors are converted to results, never raised."""

    @pytest.mark.asyncio
    async def test_upstream_error(self, client, factory):
        client.request.side_effect = UpstreamError("Failed to GET posts: HTTP 500", operation="GET posts")
        extractor = make_extractor(ExtractionResult(success=True, method="GET", endpoint="posts"))
        orch = make_orchestrator(extractor, MagicMock(), factory)

        result = await orch.process("list posts", CREDENTIALS)

        assert result.success is False
        assert result.code == "upstream_error"
        assert result.status_code == 502
        assert "HTTP 500" in result.output
        client.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_error(self, client, factory):
        client.request.side_effect = KeyError("boom")
        extractor = make_extractor(ExtractionResult(success=True, method="GET", endpoint="posts"))
        orch = make_orchestrator(extractor, MagicMock(), factory)

        result = await orch.process("list posts", CREDENTIALS)

        assert result.success is False
        assert result.code == "internal_error"
        assert result.status_code == 500


class TestClassifierResolution:
    """Classifier resolution through the default 0.7 gate."""

    @pytest.mark.parametrize(
        "text,resource,action",
        [
            ("Show me all the posts", "posts", Action.GET),
            ("Create a new post called 'Hello World' with content 'This is my first post'", "posts", Action.CREATE),
            ("get posts", "posts", Action.GET),
            ("show me post 5", "posts", Action.GET_BY_ID),
            ("get all the pages", "pages", Action.GET),
            ("activate the akismet plugin", "plugins", Action.ACTIVATE),
            ("delete the post with ID 456", "posts", Action.DELETE),
            ("update the user with ID 2", "users", Action.UPDATE),
        ],
    )
    @pytest.mark.asyncio
    async def test_passes_gate(self, factory, trained_classifier, text, resource, action):
        orch = make_orchestrator(make_extractor(available=False), trained_classifier, factory)
        operation = await orch._resolve_with_classifier(text)
        assert operation.resource == resource
        assert operation.action == action

    @pytest.mark.asyncio
    async def test_delete_with_id_phrase_deletes(self, client, factory, trained_classifier):
        orch = make_orchestrator(make_extractor(available=False), trained_classifier, factory)

        result = await orch.process("delete the post with ID 456", CREDENTIALS)

        assert result.success is True
        assert result.interpretation == "DELETE operation on posts"
        client.delete_post.assert_awaited_once_with("456")
        client.get_post.assert_not_called()
