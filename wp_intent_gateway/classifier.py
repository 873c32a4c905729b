"""
Local statistical intent classifier.

A TF-IDF nearest-neighbour model trained once at startup from a fixed
corpus of English utterances labelled ``wpapi.<resource>.<action>``.
Slot placeholders (``%id%``, ``%plugin%``) in the corpus mark where
entities are anchored; at inference the same slots are extracted from
the text and replaced by the placeholder tokens before vectorizing.

Filler words ("the", "all", "with", "id", ...) are dropped by the
vectorizer. When the text contains an action verb, only utterances whose
action that verb allows can be matched, so "delete the post with id 4"
can never resolve to a read.
"""

import logging
import re
from typing import Dict, FrozenSet, List, Optional, Tuple

from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from .models import Action, ClassifierOutput, IntentLabel

logger = logging.getLogger("wp-gateway.classifier")

_ID_TOKEN = "slotid"
_PLUGIN_TOKEN = "slotplugin"
_PLUGIN_SLOT = f"plugin {_PLUGIN_TOKEN}"

_TITLE_RE = re.compile(r"\b(?:called|titled|named|with\s+(?:the\s+)?title|title)\s+[\"']([^\"']+)[\"']", re.I)
_CONTENT_RE = re.compile(r"\b(?:with\s+)?(?:the\s+)?(?:content|text|body)\s+[\"']([^\"']+)[\"']", re.I)
_QUOTED_RE = re.compile(r"[\"'][^\"']*[\"']")
_REASSIGN_RE = re.compile(r"\breassign(?:ing)?\s+(?:(?:posts?|content)\s+)?(?:to\s+)?(?:user\s+)?(\d+)\b", re.I)
_ID_RE = re.compile(r"\b(\d+)\b")
# "plugin akismet" and "the akismet plugin"; plural "plugins" never names one
_PLUGIN_AFTER_RE = re.compile(r"\bplugin\s+(?:named\s+|called\s+)?([a-z0-9][\w.-]*)", re.I)
_PLUGIN_BEFORE_RE = re.compile(r"\b([a-z0-9][\w.-]*)\s+plugin\b", re.I)
_FILE_RE = re.compile(r"\b(?:file|image)\s+((?:/|\./|~/)\S+)", re.I)
_DIGITS_RE = re.compile(r"\b\d+\b")
_WORD_RE = re.compile(r"[a-z]+")

_PLUGIN_SKIP = frozenset({
    "a", "an", "the", "this", "that", "my", "our", "with", "id", "named", "called",
    "is", "are", "and", "of", "for", "to", "which", "what", "new",
    "get", "list", "show", "display", "view", "find", "fetch", "retrieve",
    "activate", "deactivate", "enable", "disable", "install", "installed",
    "status", "details", "info", "settings",
})

# Dropped before building n-grams, in the corpus and at inference alike
FILLER_WORDS = (
    "all", "an", "and", "any", "by", "can", "could", "every", "existing", "for",
    "id", "me", "my", "new", "number", "of", "our", "please", "some", "that",
    "the", "this", "to", "with", "would", "you",
)

_READ = frozenset({Action.GET, Action.GET_BY_ID, Action.GET_BY_NAME})

# Verb -> actions it may express
VERB_ACTIONS: Dict[str, FrozenSet[Action]] = {
    **{verb: _READ for verb in ("get", "list", "show", "display", "view", "fetch", "retrieve", "find")},
    **{verb: frozenset({Action.CREATE}) for verb in ("create", "make", "write", "register")},
    "add": frozenset({Action.CREATE, Action.UPLOAD}),
    "publish": frozenset({Action.CREATE, Action.UPDATE}),
    **{verb: frozenset({Action.UPDATE}) for verb in ("update", "edit", "modify", "change", "rename")},
    **{verb: frozenset({Action.DELETE}) for verb in ("delete", "remove", "trash", "erase")},
    "upload": frozenset({Action.UPLOAD}),
    **{verb: frozenset({Action.ACTIVATE}) for verb in ("activate", "enable")},
    **{verb: frozenset({Action.DEACTIVATE}) for verb in ("deactivate", "disable")},
}

_READ_VERBS = ("get", "list", "show", "display", "view", "fetch", "retrieve", "find")
_UPDATE_VERBS = ("update", "edit", "modify", "change")
_DELETE_VERBS = ("delete", "remove", "trash", "erase")


def _crud(corpus: Dict[str, List[str]], plural: str, singular: str, create_verbs: Tuple[str, ...]) -> None:
    prefix = f"wpapi.{plural}"
    corpus[f"{prefix}.get"] = [f"{verb} {plural}" for verb in _READ_VERBS] + [
        f"show me all the {plural}",
        f"get all {plural}",
    ]
    corpus[f"{prefix}.getById"] = [f"{verb} {singular} %id%" for verb in _READ_VERBS] + [
        f"get the {singular} with id %id%",
        f"find {singular} by id %id%",
    ]
    corpus[f"{prefix}.create"] = [f"{verb} a {singular}" for verb in create_verbs] + [
        f"{create_verbs[0]} a new {singular}",
    ]
    corpus[f"{prefix}.update"] = [f"{verb} {singular} %id%" for verb in _UPDATE_VERBS] + [
        f"{verb} the {singular} with id %id%" for verb in _UPDATE_VERBS
    ]
    corpus[f"{prefix}.delete"] = [f"{verb} {singular} %id%" for verb in _DELETE_VERBS] + [
        f"{verb} the {singular} with id %id%" for verb in _DELETE_VERBS
    ]


def _build_corpus() -> Dict[str, List[str]]:
    """Training utterances per label."""
    corpus: Dict[str, List[str]] = {}

    # --- Content ---
    _crud(corpus, "posts", "post", ("create", "add", "write", "publish", "make"))
    _crud(corpus, "pages", "page", ("create", "add", "publish", "make"))

    # --- Users, taxonomies and comments ---
    _crud(corpus, "users", "user", ("create", "add", "register"))
    _crud(corpus, "categories", "category", ("create", "add", "make"))
    _crud(corpus, "tags", "tag", ("create", "add", "make"))
    _crud(corpus, "comments", "comment", ("create", "add", "write"))
    corpus["wpapi.comments.create"] += ["post a comment", "leave a comment"]

    # --- Media ---
    corpus["wpapi.media.get"] = [f"{verb} media" for verb in _READ_VERBS] + [
        "list media items",
        "show me the media library",
    ]
    corpus["wpapi.media.getById"] = [f"{verb} media %id%" for verb in _READ_VERBS] + [
        "get the media item with id %id%",
    ]
    corpus["wpapi.media.upload"] = [
        "upload media",
        "upload a file",
        "upload an image",
        "upload a picture",
        "add an image",
        "add a file",
        "add media",
    ]
    corpus["wpapi.media.delete"] = [f"{verb} media %id%" for verb in _DELETE_VERBS] + [
        f"{verb} the media item with id %id%" for verb in _DELETE_VERBS
    ]

    # --- Menus ---
    corpus["wpapi.menus.get"] = [f"{verb} menus" for verb in _READ_VERBS] + ["show me all the menus"]
    corpus["wpapi.menus.getById"] = [f"{verb} menu %id%" for verb in _READ_VERBS] + ["get the menu with id %id%"]

    # --- Plugins ---
    corpus["wpapi.plugins.get"] = [f"{verb} plugins" for verb in _READ_VERBS] + ["show installed plugins"]
    corpus["wpapi.plugins.getByName"] = [f"{verb} plugin %plugin%" for verb in _READ_VERBS]
    corpus["wpapi.plugins.activate"] = ["activate plugin %plugin%", "enable plugin %plugin%"]
    corpus["wpapi.plugins.deactivate"] = ["deactivate plugin %plugin%", "disable plugin %plugin%"]

    # --- Settings ---
    corpus["wpapi.settings.get"] = [f"{verb} settings" for verb in _READ_VERBS] + ["show site settings"]
    corpus["wpapi.settings.update"] = [f"{verb} settings" for verb in _UPDATE_VERBS] + ["update site settings"]

    return corpus


TRAINING_CORPUS: Dict[str, List[str]] = _build_corpus()


def _match_plugin(text: str) -> Optional[re.Match]:
    for pattern in (_PLUGIN_AFTER_RE, _PLUGIN_BEFORE_RE):
        for m in pattern.finditer(text):
            if m.group(1).lower() not in _PLUGIN_SKIP:
                return m
    return None


def _analyze(text: str) -> Tuple[str, Dict[str, str]]:
    """
    Extract slot values and return the text prepared for vectorizing.

    Quoted values and the clauses introducing them are removed, the plugin
    name and numbers are replaced by placeholder tokens.
    """
    entities: Dict[str, str] = {}
    working = text or ""

    m = _TITLE_RE.search(working)
    if m:
        entities["title"] = m.group(1).strip()
    m = _CONTENT_RE.search(working)
    if m:
        entities["content"] = m.group(1).strip()
    m = _FILE_RE.search(working)
    if m:
        entities["file"] = m.group(1)
        working = working[: m.start(1)] + working[m.end(1):]

    working = _TITLE_RE.sub(" ", working)
    working = _CONTENT_RE.sub(" ", working)
    working = _QUOTED_RE.sub(" ", working)

    m = _REASSIGN_RE.search(working)
    if m:
        entities["reassign"] = m.group(1)
        working = working[: m.start()] + " " + working[m.end():]

    m = _match_plugin(working)
    if m:
        entities["plugin"] = m.group(1)
        working = working[: m.start()] + _PLUGIN_SLOT + working[m.end():]

    m = _ID_RE.search(working)
    if m:
        entities["id"] = m.group(1)
    working = _DIGITS_RE.sub(_ID_TOKEN, working)

    return " ".join(working.lower().split()), entities


def _prepare_utterance(utterance: str) -> str:
    return utterance.replace("%id%", _ID_TOKEN).replace("%plugin%", _PLUGIN_TOKEN)


def allowed_actions(prepared: str) -> FrozenSet[Action]:
    """Actions permitted by the verbs in the text; empty when it has none."""
    allowed: FrozenSet[Action] = frozenset()
    for word in _WORD_RE.findall(prepared):
        allowed = allowed | VERB_ACTIONS.get(word, frozenset())
    return allowed


def extract_entities(text: str) -> Dict[str, str]:
    """Slot values found in the text (id, plugin, title, content, reassign, file)."""
    return _analyze(text)[1]


class IntentClassifier:
    """
    Nearest-neighbour classifier over TF-IDF vectors.

    The score is the cosine similarity to the closest training utterance
    whose action agrees with the verbs in the text, so an utterance from
    the corpus scores 1.0 and unrelated text scores 0.
    """

    def __init__(self, corpus: Optional[Dict[str, List[str]]] = None) -> None:
        self._corpus = corpus if corpus is not None else TRAINING_CORPUS
        self._vectorizer: Optional[TfidfVectorizer] = None
        self._matrix = None
        self._labels: List[str] = []
        self._actions: List[Action] = []

    @property
    def trained(self) -> bool:
        return self._vectorizer is not None

    @property
    def labels(self) -> List[str]:
        return sorted(self._corpus)

    def train(self) -> None:
        """Fit the model once. Later calls are no-ops."""
        if self.trained:
            return

        texts: List[str] = []
        labels: List[str] = []
        actions: List[Action] = []
        for label, utterances in self._corpus.items():
            action = IntentLabel.parse(label).action
            for utterance in utterances:
                texts.append(_prepare_utterance(utterance))
                labels.append(label)
                actions.append(action)

        vectorizer = TfidfVectorizer(ngram_range=(1, 2), sublinear_tf=True, stop_words=list(FILLER_WORDS))
        self._matrix = vectorizer.fit_transform(texts)
        self._labels = labels
        self._actions = actions
        self._vectorizer = vectorizer

        logger.info(f"Intent classifier trained on {len(texts)} utterances, {len(self._corpus)} labels")

    def classify(self, text: str) -> ClassifierOutput:
        """Return the best label, its score and extracted entities. Never raises for unknown text."""
        if not self.trained:
            raise RuntimeError("IntentClassifier.train() must be called before classify()")

        prepared, entities = _analyze(text)
        vector = self._vectorizer.transform([prepared])
        similarities = cosine_similarity(vector, self._matrix)[0]

        candidates = range(len(self._labels))
        allowed = allowed_actions(prepared)
        if allowed:
            candidates = [i for i in candidates if self._actions[i] in allowed]
        if not candidates:
            logger.debug(f"No utterance agrees with the verbs in '{prepared}'")
            return ClassifierOutput(label=self._labels[int(similarities.argmax())], score=0.0, entities=entities)

        best = max(candidates, key=lambda i: similarities[i])
        score = min(max(float(similarities[best]), 0.0), 1.0)

        logger.debug(f"Classified '{prepared}' as {self._labels[best]} ({score:.2f})")
        return ClassifierOutput(label=self._labels[best], score=round(score, 4), entities=entities)
