from __future__ import annotations

from dataclasses import dataclass

# (marker, weight) pairs; each marker contributes its weight once when present.
Marker = tuple[str, int]
# (regex pattern, replacement) pairs applied in order.
RewriteRule = tuple[str, str]
KeywordGroup = tuple[str, tuple[str, ...]]


@dataclass(frozen=True)
class Lexicon:
    locale: str
    version: str

    formal_markers: tuple[Marker, ...]
    informal_markers: tuple[Marker, ...]
    enthusiasm_markers: tuple[Marker, ...]
    direct_markers: tuple[Marker, ...]
    indirect_markers: tuple[Marker, ...]
    polite_markers: tuple[Marker, ...]

    conjunctions: tuple[str, ...]
    interjections: tuple[str, ...]
    fillers: tuple[str, ...]
    endings: tuple[str, ...]
    stop_words: frozenset[str]
    topic_keywords: tuple[KeywordGroup, ...]

    detail_words: tuple[str, ...]
    motivation_keywords: tuple[str, ...]
    pain_keywords: tuple[str, ...]
    technical_terms: tuple[str, ...]
    project_triggers: tuple[str, ...]
    project_anchors: tuple[str, ...]
    preference_indicators: tuple[str, ...]
    positive_preference_indicators: tuple[str, ...]

    progress_keywords: tuple[str, ...]
    achievement_keywords: tuple[str, ...]
    goal_keywords: tuple[str, ...]
    wish_keywords: tuple[str, ...]

    default_topic: str
    positive_sentiment_words: tuple[str, ...]
    negative_sentiment_words: tuple[str, ...]
    intent_rules: tuple[KeywordGroup, ...]
    default_intent: str

    synonym_groups: tuple[KeywordGroup, ...]
    conjunction_swaps: tuple[tuple[str, str], ...]
    concise_rules: tuple[RewriteRule, ...]
    expand_rules: tuple[RewriteRule, ...]
    formal_rules: tuple[RewriteRule, ...]
    casual_rules: tuple[RewriteRule, ...]
    enthusiasm_rules: tuple[RewriteRule, ...]
    calm_rules: tuple[RewriteRule, ...]
    direct_rules: tuple[RewriteRule, ...]
    indirect_rules: tuple[RewriteRule, ...]
    polite_rules: tuple[RewriteRule, ...]
    exclamation_rules: tuple[RewriteRule, ...]
    complexify_suffix: str
    explanatory_phrases: tuple[str, ...]
    positive_words: tuple[str, ...]
    motivational_phrases: tuple[str, ...]
    motivation_template: str
    preference_note: str
    project_template: str
    concise_max_words: int = 12
    # Particles attach on the right of a word, so word matches anchor only on the left.
    attached_particles: bool = False
    ending_anchor: str | None = None
    sentence_separator: str = ". "


KOREAN = Lexicon(
    locale="ko",
    version="2024.1",
    formal_markers=(("습니다", 20), ("입니다", 20), ("하십시오", 20), ("해주세요", 20), ("드립니다", 20)),
    informal_markers=(("해", 20), ("야", 20), ("지", 20), ("거야", 20), ("네", 20), ("어", 20)),
    enthusiasm_markers=(
        ("!", 15),
        ("와", 15),
        ("대박", 15),
        ("완전", 15),
        ("진짜", 15),
        ("정말", 15),
        ("너무", 15),
    ),
    direct_markers=(("바로", 20), ("즉시", 20), ("확실히", 20), ("당연히", 20), ("명확히", 20)),
    indirect_markers=(("아마", 20), ("혹시", 20), ("좀", 20), ("살짝", 20), ("약간", 20)),
    polite_markers=(("감사", 20), ("죄송", 20), ("부탁", 20), ("양해", 20), ("고마", 20), ("미안", 20)),
    conjunctions=("그리고", "하지만", "그런데", "그러나", "또한", "또", "그래서", "따라서"),
    interjections=("아", "오", "와", "어", "음", "허", "참"),
    fillers=("뭔가", "좀", "약간", "살짝", "어떻게", "그냥"),
    endings=("요", "어요", "네요", "죠", "거에요", "는데요", "군요"),
    stop_words=frozenset(
        ("이", "그", "저", "것", "수", "있", "하", "되", "의", "가", "을", "를", "에", "와", "과", "도", "만", "부터", "까지")
    ),
    topic_keywords=(
        ("비즈니스", ("사업", "비즈니스", "회사", "기업", "창업", "매출", "수익")),
        ("브랜딩", ("브랜드", "브랜딩", "포지셔닝", "차별화", "아이덴티티")),
        ("마케팅", ("마케팅", "광고", "홍보", "프로모션", "캠페인")),
        ("콘텐츠", ("콘텐츠", "컨텐츠", "포스팅", "글", "영상", "사진")),
        ("고객", ("고객", "소비자", "구매자", "타겟", "클라이언트")),
        ("전략", ("전략", "계획", "방향", "목표", "로드맵")),
        ("성장", ("성장", "확장", "발전", "개선", "향상")),
        ("기술", ("기술", "시스템", "플랫폼", "솔루션", "도구")),
    ),
    detail_words=("자세히", "구체적", "상세", "정확히", "명확히"),
    motivation_keywords=("성장", "개선", "향상", "성공", "목표", "발전", "확장"),
    pain_keywords=("어려움", "문제", "힘들", "고민", "걱정", "부족", "막힘"),
    technical_terms=("api", "시스템", "데이터", "분석", "최적화", "자동화", "플랫폼"),
    project_triggers=("프로젝트", "런칭", "오픈", "시작", "계획", "준비"),
    project_anchors=("프로젝트", "런칭", "오픈"),
    preference_indicators=("좋아", "선호", "싫어", "피하고 싶", "중요한"),
    positive_preference_indicators=("좋아", "선호"),
    progress_keywords=("완성", "진행", "시작", "끝", "런칭", "오픈"),
    achievement_keywords=("성공", "달성", "완료", "해결"),
    goal_keywords=("목표", "계획", "하고 싶", "이루고 싶"),
    wish_keywords=("좋아", "선호", "원해", "바라"),
    default_topic="general",
    positive_sentiment_words=("좋", "만족", "훌륭", "최고", "감사", "도움", "효과", "성공"),
    negative_sentiment_words=("나쁘", "어렵", "힘들", "문제", "실패", "부족", "못하", "안되"),
    intent_rules=(
        ("방법 문의", ("어떻게", "방법", "?")),
        ("조언 요청", ("조언", "추천", "의견")),
        ("평가 요청", ("어떤가", "평가", "생각")),
        ("문제 해결", ("문제", "어려움", "힘들")),
        ("정보 요청", ("알려", "설명", "무엇")),
    ),
    default_intent="일반 대화",
    synonym_groups=(
        ("좋은", ("훌륭한", "멋진", "대단한", "완벽한")),
        ("방법", ("방식", "전략", "접근법", "노하우")),
        ("중요한", ("핵심", "주요한", "필수적인", "중차대한")),
        ("도움", ("지원", "도움말", "가이드", "조언")),
    ),
    conjunction_swaps=(("하지만", "그런데"), ("그리고", "또한"), ("따라서", "그래서")),
    concise_rules=(
        (r"매우\s+", ""),
        (r"정말로\s+", ""),
        (r"사실\s+", ""),
        (r"\s*,\s*그리고\s*", ", "),
    ),
    expand_rules=(
        (r"좋", "정말 좋"),
        (r"해보세요", "시도해보시면 좋을 것 같아요"),
        (r"입니다", "입니다. 이는 매우 중요한 부분이에요"),
        (r"\.", ". 더 구체적으로 말씀드리면,"),
    ),
    formal_rules=(
        (r"해요", "합니다"),
        (r"이에요", "입니다"),
        (r"거예요", "것입니다"),
        (r"!", "."),
        (r"그냥", "단순히"),
        (r"좀", "조금"),
    ),
    casual_rules=(
        (r"것입니다", "거예요"),
        (r"합니다", "해요"),
        (r"입니다", "이에요"),
        (r"조금", "좀"),
        (r"단순히", "그냥"),
    ),
    enthusiasm_rules=(
        (r"좋", "정말 좋"),
        (r"\.", "!"),
        (r"네", "네!"),
        (r"해보세요", "꼭 해보세요!"),
    ),
    calm_rules=(
        (r"!", "."),
        (r"정말\s+", ""),
        (r"꼭\s+", ""),
        (r"완전\s+", ""),
    ),
    direct_rules=(
        (r"아마\s*", ""),
        (r"혹시\s*", ""),
        (r"좀\s*", ""),
        (r"생각합니다", "확신합니다"),
        (r"것 같아요", "것이 맞아요"),
    ),
    indirect_rules=(
        (r"해야 합니다", "해보시면 좋을 것 같아요"),
        (r"확실히", "아마"),
        (r"맞습니다", "맞는 것 같습니다"),
        (r"입니다", "인 것 같아요"),
    ),
    polite_rules=(
        (r"생각해보세요", "고려해보시기 바랍니다"),
        (r"해보세요", "해보시기 바랍니다"),
        (r"주세요", "주시면 감사하겠습니다"),
    ),
    exclamation_rules=(
        (r"\. ([가-힣]+(?:요|다))$", r"! \1!"),
        (r"(정말|진짜|완전)\s+([가-힣]+)", r"\1 \2!"),
    ),
    complexify_suffix=", 이는 매우 중요한 포인트입니다",
    explanatory_phrases=("예를 들어", "다시 말해", "즉"),
    positive_words=("좋", "훌륭", "완벽", "성공", "최고"),
    motivational_phrases=("성장을 위해", "목표 달성을 위해", "더 나은 결과를 위해"),
    motivation_template="{factor}을 고려하여, {content}",
    preference_note=" (이전에 말씀하신 선호도를 고려했습니다)",
    project_template=" 진행 중이신 {name} 프로젝트와 연관지어 보면 더욱 효과적일 것 같아요.",
    attached_particles=True,
    ending_anchor=r"요$",
)


ENGLISH = Lexicon(
    locale="en",
    version="2024.1",
    formal_markers=(
        ("regards", 20),
        ("sincerely", 20),
        ("kindly", 20),
        ("would you", 20),
        ("furthermore", 20),
    ),
    informal_markers=(("gonna", 20), ("wanna", 20), ("yeah", 20), ("hey", 20), ("lol", 20), ("kinda", 20)),
    enthusiasm_markers=(
        ("!", 15),
        ("wow", 15),
        ("awesome", 15),
        ("amazing", 15),
        ("totally", 15),
        ("really", 15),
        ("so much", 15),
    ),
    direct_markers=(("immediately", 20), ("definitely", 20), ("clearly", 20), ("obviously", 20), ("right now", 20)),
    indirect_markers=(("maybe", 20), ("perhaps", 20), ("might", 20), ("a bit", 20), ("slightly", 20)),
    polite_markers=(("thank", 20), ("sorry", 20), ("please", 20), ("appreciate", 20), ("grateful", 20), ("excuse", 20)),
    conjunctions=("and", "but", "however", "also", "so", "therefore", "because", "although"),
    interjections=("oh", "ah", "wow", "hmm", "huh", "oops", "yay"),
    fillers=("like", "basically", "actually", "literally", "kind of", "just"),
    endings=("right?", "you know", "I guess", "anyway", "though", "for sure"),
    stop_words=frozenset(
        (
            "the", "a", "an", "and", "or", "but", "to", "of", "in", "on", "at", "for", "with",
            "is", "are", "was", "were", "be", "it", "this", "that", "i", "you", "we", "my", "me",
        )
    ),
    topic_keywords=(
        ("business", ("business", "company", "startup", "revenue", "sales", "profit")),
        ("branding", ("brand", "branding", "positioning", "identity", "differentiation")),
        ("marketing", ("marketing", "advertising", "promotion", "campaign", "ads")),
        ("content", ("content", "post", "posting", "video", "photo", "article")),
        ("customers", ("customer", "client", "buyer", "audience", "consumer")),
        ("strategy", ("strategy", "plan", "roadmap", "goal", "direction")),
        ("growth", ("growth", "grow", "scale", "improve", "expand")),
        ("technology", ("technology", "system", "platform", "tool", "software")),
    ),
    detail_words=("detailed", "specific", "specifically", "exactly", "precisely"),
    motivation_keywords=("growth", "improve", "success", "goal", "progress", "scale", "expand"),
    pain_keywords=("problem", "struggle", "difficult", "worry", "stuck", "issue", "lacking"),
    technical_terms=("api", "system", "data", "analysis", "optimization", "automation", "platform"),
    project_triggers=("project", "launch", "kickoff", "start", "plan", "prepare"),
    project_anchors=("project", "launch"),
    preference_indicators=("i like", "i prefer", "i hate", "i avoid", "important to me"),
    positive_preference_indicators=("i like", "i prefer"),
    progress_keywords=("finished", "working on", "started", "done", "launched", "shipped"),
    achievement_keywords=("succeeded", "achieved", "completed", "solved"),
    goal_keywords=("goal", "plan", "want to", "hope to"),
    wish_keywords=("i like", "i prefer", "i want", "i wish"),
    default_topic="general",
    positive_sentiment_words=("good", "great", "happy", "best", "thanks", "helpful", "works", "success"),
    negative_sentiment_words=("bad", "hard", "difficult", "problem", "fail", "lacking", "can't", "broken"),
    intent_rules=(
        ("how_to", ("how do", "how can", "?")),
        ("advice", ("advice", "recommend", "opinion")),
        ("evaluation", ("what do you think", "evaluate", "review")),
        ("problem_solving", ("problem", "struggle", "stuck")),
        ("information", ("tell me", "explain", "what is")),
    ),
    default_intent="chat",
    synonym_groups=(
        ("good", ("great", "excellent", "awesome", "perfect")),
        ("method", ("approach", "strategy", "technique", "playbook")),
        ("important", ("key", "crucial", "essential", "critical")),
        ("help", ("support", "guidance", "advice", "assistance")),
    ),
    conjunction_swaps=(("but", "however"), ("and", "also"), ("therefore", "so")),
    concise_rules=(
        (r"\bvery\s+", ""),
        (r"\breally\s+", ""),
        (r"\bactually\s+", ""),
        (r"\s*,\s*and\s+", ", "),
    ),
    expand_rules=(
        (r"\bgood\b", "really good"),
        (r"\btry it\b", "give it a try when you have a moment"),
        (r"\.", ". To put it more concretely,"),
    ),
    formal_rules=(
        (r"\bdon't\b", "do not"),
        (r"\bcan't\b", "cannot"),
        (r"\bwon't\b", "will not"),
        (r"\bit's\b", "it is"),
        (r"\bgonna\b", "going to"),
        (r"!", "."),
        (r"\bjust\b", "simply"),
    ),
    casual_rules=(
        (r"\bdo not\b", "don't"),
        (r"\bcannot\b", "can't"),
        (r"\bwill not\b", "won't"),
        (r"\bit is\b", "it's"),
        (r"\bsimply\b", "just"),
    ),
    enthusiasm_rules=(
        (r"\bgood\b", "really good"),
        (r"\.", "!"),
        (r"\btry it\b", "definitely try it!"),
    ),
    calm_rules=(
        (r"!", "."),
        (r"\breally\s+", ""),
        (r"\bdefinitely\s+", ""),
        (r"\btotally\s+", ""),
    ),
    direct_rules=(
        (r"\bmaybe\s*", ""),
        (r"\bperhaps\s*", ""),
        (r"\bI think\b", "I'm sure"),
        (r"\bit seems\b", "it is"),
    ),
    indirect_rules=(
        (r"\byou must\b", "you might want to"),
        (r"\bdefinitely\b", "probably"),
        (r"\bis right\b", "seems right"),
    ),
    polite_rules=(
        (r"\bconsider\b", "kindly consider"),
        (r"\btry\b", "please try"),
        (r"\blet me know\b", "I'd appreciate it if you let me know"),
    ),
    exclamation_rules=(
        (r"\b(really|so|totally)\s+(\w+)", r"\1 \2!"),
    ),
    complexify_suffix=", which is a really important point",
    explanatory_phrases=("for example", "in other words", "that is"),
    positive_words=("good", "great", "perfect", "success", "best"),
    motivational_phrases=("for growth", "to reach the goal", "for better results"),
    motivation_template="With {factor} in mind, {content}",
    preference_note=" (taking your earlier preferences into account)",
    project_template=" This ties in nicely with your ongoing {name} project.",
)


_LEXICONS: dict[str, Lexicon] = {
    KOREAN.locale: KOREAN,
    ENGLISH.locale: ENGLISH,
}


def get_lexicon(locale: str = "ko") -> Lexicon:
    key = locale.strip().lower()
    if key not in _LEXICONS:
        raise KeyError(f"No lexicon registered for locale: {locale}")
    return _LEXICONS[key]


def available_locales() -> list[str]:
    return sorted(_LEXICONS)
