"""Static few-shot analysis examples."""

import json
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class AnalysisExample:
    category: str
    title: str
    description: str
    source: str
    region: str
    output: dict[str, Any]
    reasoning: str


POLICY_EXAMPLE = AnalysisExample(
    category="policy",
    title="Fed Raises Interest Rates by 0.25%, Signals More Hikes Ahead",
    description=(
        "The Federal Reserve raised its benchmark interest rate by 25 basis points to a range "
        "of 5.25%-5.5%, the highest level in 22 years. Chair Powell indicated that further rate "
        "increases may be necessary to bring inflation down to the 2% target."
    ),
    source="CNBC",
    region="US",
    output={
        "headline_summary": (
            "The Fed lifted its key rate by a quarter point to 5.25-5.5%, the highest in 22 years, "
            "and left the door open to more hikes. Borrowing gets more expensive for households "
            "and companies, and the dollar is likely to stay strong while inflation stays above 2%."
        ),
        "so_what": {
            "main_point": (
                "The Fed's rate works like the thermostat for the whole world's money. Turning it "
                "up cools spending: mortgages, car loans and credit cards all cost more, so people "
                "and companies borrow less. A strong dollar also pulls money out of emerging markets. "
                "Think of it as the price of money going up everywhere at once."
            ),
            "market_signal": (
                "Negative for growth and tech stocks, whose valuations depend on cheap money. Banks "
                "may benefit from wider interest margins. Bond yields stay elevated."
            ),
            "time_horizon": "medium",
        },
        "impact_analysis": {
            "investors": {
                "summary": (
                    "Expect more volatility in stocks, especially growth names. Short-term bonds "
                    "now pay a meaningful yield, so cash-like assets look more attractive than in years."
                ),
                "action_items": [
                    "Review how much of your portfolio sits in rate-sensitive growth stocks",
                    "Compare short-term bond ETF yields with your savings rate",
                ],
                "sectors_affected": ["Banks (benefit)", "Real estate (hurt)", "Technology (hurt)"],
            },
            "workers": {
                "summary": (
                    "Higher rates push companies to cut costs, and hiring usually slows first in "
                    "rate-sensitive industries such as construction, real estate and startups."
                ),
                "industries_affected": ["Construction", "Real estate", "Startups"],
                "job_outlook": "Hiring may cool over the next few months; essential sectors such as healthcare stay steadier.",
            },
            "consumers": {
                "summary": (
                    "Variable-rate loans and card balances get more expensive within weeks. Savers "
                    "finally earn more on deposits, so it is a good moment to compare bank rates."
                ),
                "price_impact": "Loan payments rise; imported goods may get slightly cheaper thanks to the strong dollar.",
                "spending_advice": "Pay down variable-rate debt first and hold off on large financed purchases if you can.",
            },
        },
        "related_context": {
            "background": (
                "The Fed has raised rates eleven times since March 2022 to fight the worst "
                "inflation in four decades. Inflation has eased but core prices remain sticky."
            ),
            "related_events": ["June CPI release", "ECB rate decision", "Regional bank stress earlier this year"],
            "what_to_watch": "Next month's CPI and jobs reports will decide whether September brings another hike.",
        },
        "keywords": ["Federal Reserve", "interest rates", "inflation", "Powell", "monetary policy"],
        "category": "policy",
        "sentiment": {"overall": "negative", "confidence": 0.75},
        "importance_score": 9,
    },
    reasoning="A central bank decision with global reach, explained through its effect on everyday borrowing.",
)

MARKETS_EXAMPLE = AnalysisExample(
    category="markets",
    title="코스피, 외국인 순매수에 2% 상승…반도체주 강세",
    description=(
        "코스피가 외국인 투자자의 대규모 순매수에 힘입어 전일 대비 2.1% 상승한 2,650으로 마감했다. "
        "삼성전자와 SK하이닉스가 각각 4%, 6% 오르며 지수 상승을 이끌었다."
    ),
    source="매일경제",
    region="KR",
    output={
        "headline_summary": (
            "외국인 투자자들이 반도체주를 대거 사들이면서 코스피가 2.1% 올라 2,650에 마감했어요. "
            "삼성전자와 SK하이닉스가 상승을 주도했고, 반도체 경기 회복 기대가 시장 전체를 끌어올렸어요."
        ),
        "so_what": {
            "main_point": (
                "외국인 자금은 한국 증시의 큰 물줄기 같은 존재예요. 이 물줄기가 반도체로 몰렸다는 건 "
                "글로벌 투자자들이 메모리 업황 반등에 베팅하고 있다는 뜻이에요. 반도체는 한국 수출의 "
                "약 20%를 차지하니, 마치 집안 가장의 월급이 오를 조짐이 보이는 것과 비슷해요."
            ),
            "market_signal": "긍정적이에요. 반도체 중심의 외국인 매수가 며칠 더 이어지면 지수 상단이 열릴 수 있어요.",
            "time_horizon": "short",
        },
        "impact_analysis": {
            "investors": {
                "summary": "반도체 대형주 비중이 높은 투자자에게 우호적이에요. 다만 하루 급등 뒤에는 차익 실현이 나오기 쉬워요.",
                "action_items": ["추격 매수보다 분할 매수로 접근하기", "반도체 ETF 비중 점검하기"],
                "sectors_affected": ["반도체 (수혜)", "IT 부품 (수혜)"],
            },
            "workers": {
                "summary": "반도체 업황이 살아나면 관련 협력사까지 채용과 성과급 기대가 커져요.",
                "industries_affected": ["반도체", "전자부품", "장비"],
                "job_outlook": "하반기 반도체 관련 채용이 늘어날 가능성이 있어요.",
            },
            "consumers": {
                "summary": "당장 장바구니 물가에 주는 영향은 작지만, 증시 호조는 소비 심리를 조금 끌어올려요.",
                "price_impact": "직접적인 가격 변화는 거의 없어요.",
                "spending_advice": "주가 상승에 들떠 무리한 소비나 대출 투자는 피하는 게 좋아요.",
            },
        },
        "related_context": {
            "background": "메모리 가격이 3개 분기 연속 하락한 뒤 감산 효과가 나타나기 시작했어요.",
            "related_events": ["미국 반도체 기업 실적 발표", "메모리 현물 가격 반등"],
            "what_to_watch": "다음 달 수출입 통계의 반도체 수출 증감률을 눈여겨보세요.",
        },
        "keywords": ["코스피", "외국인 순매수", "반도체", "삼성전자", "SK하이닉스"],
        "category": "markets",
        "sentiment": {"overall": "positive", "confidence": 0.8},
        "importance_score": 7,
    },
    reasoning="Korean article analyzed in Korean; one figure-driven market move tied to its cause.",
)

BUSINESS_EXAMPLE = AnalysisExample(
    category="business",
    title="Apple Beats Quarterly Earnings Estimates as Services Revenue Hits Record",
    description=(
        "Apple reported quarterly revenue of $89.5 billion, ahead of analyst estimates, as its "
        "services business posted record revenue of $22.3 billion, offsetting weaker iPhone sales."
    ),
    source="CNBC",
    region="US",
    output={
        "headline_summary": (
            "Apple beat revenue forecasts with $89.5 billion as subscriptions and the App Store set a "
            "record, making up for softer iPhone sales. The company is leaning more on recurring "
            "services income, which investors value for its stability."
        ),
        "so_what": {
            "main_point": (
                "Apple is slowly turning from a phone seller into a subscription company. Services are "
                "like a gym membership: smaller than the hardware sale, but paid every month. That "
                "steadier income is why investors forgive a slower iPhone cycle."
            ),
            "market_signal": "Mildly positive for large-cap tech; confirms that services growth can carry results.",
            "time_horizon": "medium",
        },
        "impact_analysis": {
            "investors": {
                "summary": "Supports the case for large-cap tech as a defensive growth holding.",
                "action_items": ["Check concentration in a single mega-cap stock"],
                "sectors_affected": ["Consumer technology", "App developers"],
            },
            "workers": {
                "summary": "Services growth supports software and content jobs more than hardware roles.",
                "industries_affected": ["Software", "Media"],
                "job_outlook": "Stable demand for software engineers; hardware supply chains see less growth.",
            },
            "consumers": {
                "summary": "Expect more bundles and subscription offers as Apple pushes services.",
                "price_impact": "Subscription prices may creep up over time.",
                "spending_advice": "Audit recurring subscriptions once a quarter.",
            },
        },
        "related_context": {
            "background": "Smartphone upgrade cycles have lengthened as phones last longer.",
            "related_events": ["Microsoft and Alphabet earnings", "App Store regulation in the EU"],
            "what_to_watch": "Guidance for the holiday quarter and any new services price changes.",
        },
        "keywords": ["Apple", "earnings", "services revenue", "iPhone"],
        "category": "business",
        "sentiment": {"overall": "positive", "confidence": 0.7},
        "importance_score": 6,
    },
    reasoning="Company results explained through a business-model shift with a simple analogy.",
)

ANALYSIS_EXAMPLES: list[AnalysisExample] = [POLICY_EXAMPLE, MARKETS_EXAMPLE, BUSINESS_EXAMPLE]


def get_example_by_category(category: str) -> Optional[AnalysisExample]:
    return next((ex for ex in ANALYSIS_EXAMPLES if ex.category == category), None)


def format_example_for_prompt(example: AnalysisExample) -> str:
    output = json.dumps(example.output, ensure_ascii=False, indent=2)
    return (
        f"### Example: {example.title}\n\n"
        "**Input:**\n"
        f"- Title: {example.title}\n"
        f"- Description: {example.description}\n"
        f"- Source: {example.source}\n\n"
        "**Analysis:**\n"
        f"```json\n{output}\n```\n\n"
        f"**Why:** {example.reasoning}\n"
    )
