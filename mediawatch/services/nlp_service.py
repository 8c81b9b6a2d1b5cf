"""
Sentiment classification for monitored posts.

A small trainable text model (TF-IDF + logistic regression) does the work when
it is available. The keyword lexicon scorer is always available and answers
whenever the model cannot.
"""
import logging
import re
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import joblib
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline

from mediawatch.core.config import settings
from mediawatch.core.exceptions import InsufficientTrainingDataError, ModelTrainingError
from mediawatch.schemas.analysis_result import SentimentResult
from mediawatch.schemas.data_ingestion import Post, Sentiment

logger = logging.getLogger(__name__)

POSITIVE_WORDS = (
    "senang", "bagus", "hebat", "sukses", "menang", "keren", "mantap",
    "great", "excellent", "success", "happy", "win",
)
NEGATIVE_WORDS = (
    "kecewa", "jelek", "gagal", "kalah", "rugi", "konflik",
    "terrible", "failure", "disappoint", "loss", "conflict",
)
LEXICON_STEP = 0.2
LABEL_THRESHOLD = 0.15
LEXICON_CONFIDENCE = 0.3

# (text, is_positive)
SEED_CORPUS: Tuple[Tuple[str, int], ...] = (
    ("Saya sangat senang dengan hasil ini", 1),
    ("Produk yang bagus sekali", 1),
    ("Keren banget, mantap", 1),
    ("Hebat, sukses terus!", 1),
    ("Great launch, the team did an excellent job", 1),
    ("Happy to see this success", 1),
    ("Saya kecewa dengan produk ini", 0),
    ("Jelek banget", 0),
    ("Gagal total", 0),
    ("Konflik makin panas", 0),
    ("Terrible service, a complete failure", 0),
    ("Disappointing loss for everyone", 0),
)


class LexicalSentimentScorer:
    """Keyword-weighted scorer used as fallback for the trained model."""

    def __init__(self, positive: Iterable[str] = POSITIVE_WORDS,
                 negative: Iterable[str] = NEGATIVE_WORDS):
        self.positive = tuple(positive)
        self.negative = tuple(negative)

    def score(self, text: str) -> SentimentResult:
        lower = (text or "").lower()
        score = 0.0
        for word in self.positive:
            if word in lower:
                score += LEXICON_STEP
        for word in self.negative:
            if word in lower:
                score -= LEXICON_STEP

        score = max(-1.0, min(1.0, score))
        if score > LABEL_THRESHOLD:
            label = Sentiment.POSITIVE
        elif score < -LABEL_THRESHOLD:
            label = Sentiment.NEGATIVE
        else:
            label = Sentiment.NEUTRAL

        return SentimentResult(
            label=label, score=round(score, 2), confident=abs(score) > LEXICON_CONFIDENCE)


def _build_pipeline() -> Pipeline:
    return Pipeline([
        ("tfidf", TfidfVectorizer(lowercase=True, analyzer="char_wb", ngram_range=(2, 4))),
        ("clf", LogisticRegression(max_iter=1000, class_weight="balanced")),
    ])


class SentimentClassifier:
    """
    Binary text model with lexical fallback.

    The fitted pipeline is held in ``self._model`` and only ever replaced as a
    whole, so a ``classify`` call works against whichever version it read at
    the start of the call.
    """

    def __init__(
        self,
        model_path: Optional[str] = None,
        fallback: Optional[LexicalSentimentScorer] = None,
        neutral_margin: Optional[float] = None,
        confidence_margin: Optional[float] = None,
        min_retrain_posts: Optional[int] = None,
    ):
        self.model_path = Path(model_path or settings.model_path)
        self.fallback = fallback or LexicalSentimentScorer()
        self.neutral_margin = (
            settings.classifier_neutral_margin if neutral_margin is None else neutral_margin)
        self.confidence_margin = (
            settings.classifier_confidence_margin if confidence_margin is None else confidence_margin)
        self.min_retrain_posts = (
            settings.retrain_min_posts if min_retrain_posts is None else min_retrain_posts)

        self._model: Optional[Pipeline] = None
        self._initialized = False
        self._init_lock = threading.Lock()
        self._swap_lock = threading.Lock()

    # ── public API ─────────────────────────────────────────────────────────

    def classify(self, text: str) -> SentimentResult:
        """Label ``text``. Never raises; any model problem falls back to the lexicon."""
        model = self._get_model()
        if model is None:
            logger.debug("Sentiment model unavailable, using lexical scorer")
            return self.fallback.score(text)

        try:
            p = self._positive_probability(model, text or "")
        except Exception as e:
            logger.warning(f"Sentiment model failed, using lexical scorer: {e}")
            return self.fallback.score(text)

        margin = abs(p - 0.5)
        if margin <= self.neutral_margin:
            return SentimentResult(
                label=Sentiment.NEUTRAL, score=0.0, confident=margin > self.confidence_margin)

        if p >= 0.5:
            label, score = Sentiment.POSITIVE, p
        else:
            label, score = Sentiment.NEGATIVE, -p
        return SentimentResult(
            label=label, score=round(score, 2), confident=margin > self.confidence_margin)

    def retrain(self, posts: Sequence[Post]) -> int:
        """
        Re-fit the model on the seed corpus plus ``posts`` and swap it in.

        Neutral posts carry no binary label and do not count towards the
        minimum batch size. Returns the number of posts that contributed to the fit.
        """
        samples = [
            (p.content, 1 if p.sentiment == Sentiment.POSITIVE else 0)
            for p in posts
            if p.sentiment != Sentiment.NEUTRAL and p.content
        ]
        if len(samples) < self.min_retrain_posts:
            raise InsufficientTrainingDataError(len(samples), self.min_retrain_posts)

        logger.info(f"Retraining sentiment model on {len(samples)} labelled posts")
        model = self._fit(list(SEED_CORPUS) + samples)

        with self._swap_lock:
            self._model = model
            self._initialized = True
        self._save(model)
        return len(samples)

    @property
    def model_loaded(self) -> bool:
        return self._model is not None

    # ── internal ───────────────────────────────────────────────────────────

    def _get_model(self) -> Optional[Pipeline]:
        if not self._initialized:
            with self._init_lock:
                if not self._initialized:
                    model = self._load_or_train()
                    with self._swap_lock:
                        if self._model is None:
                            self._model = model
                    self._initialized = True
        return self._model

    def _load_or_train(self) -> Optional[Pipeline]:
        if self.model_path.exists():
            try:
                model = joblib.load(self.model_path)
                logger.info(f"Sentiment model loaded from {self.model_path}")
                return model
            except Exception as e:
                logger.warning(f"Error loading sentiment model: {e}. Training new...")

        try:
            model = self._fit(list(SEED_CORPUS))
        except ModelTrainingError as e:
            logger.error(f"Sentiment model unavailable: {e}")
            return None
        self._save(model)
        return model

    def _fit(self, samples: List[Tuple[str, int]]) -> Pipeline:
        texts = [text for text, _ in samples]
        labels = [label for _, label in samples]
        pipeline = _build_pipeline()
        try:
            pipeline.fit(texts, labels)
        except Exception as e:
            raise ModelTrainingError(f"Fitting sentiment model failed: {e}") from e
        logger.info(f"Sentiment model trained on {len(samples)} samples")
        return pipeline

    def _save(self, model: Pipeline) -> None:
        try:
            self.model_path.parent.mkdir(parents=True, exist_ok=True)
            joblib.dump(model, self.model_path)
        except OSError as e:
            logger.error(f"Could not persist sentiment model to {self.model_path}: {e}")

    @staticmethod
    def _positive_probability(model: Pipeline, text: str) -> float:
        classes = list(model.classes_)
        proba = model.predict_proba([text])[0]
        return float(proba[classes.index(1)])


# ── content helpers used during ingestion ──────────────────────────────────

CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Politics", ("pilih", "partai", "presiden", "politik", "pemilu", "election", "parliament")),
    ("Economy", ("saham", "uang", "ekonomi", "harga", "pajak", "stock", "economy", "price", "tax")),
    ("Security", ("perang", "tentara", "polisi", "konflik", "war", "police", "military")),
    ("Technology", ("komputer", "internet", "ai", "smartphone", "software")),
    ("Disaster", ("banjir", "gempa", "bencana", "flood", "earthquake")),
    ("Health", ("virus", "obat", "sehat", "vaksin", "vaccine", "hospital")),
)
DEFAULT_CATEGORY = "Social"

HASHTAG_RE = re.compile(r"#(\w+)")
WORD_RE = re.compile(r"\w+")


def categorize(text: str) -> str:
    """Pick a category from keyword lists. Keywords of three letters or fewer must match a whole word."""
    lower = (text or "").lower()
    words = set(WORD_RE.findall(lower))
    for category, keywords in CATEGORY_KEYWORDS:
        for kw in keywords:
            if (kw in words) if len(kw) <= 3 else (kw in lower):
                return category
    return DEFAULT_CATEGORY


def extract_tags(text: str) -> List[str]:
    return list(dict.fromkeys(tag.lower() for tag in HASHTAG_RE.findall(text or "")))
