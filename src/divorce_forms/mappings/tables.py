"""Built-in field mapping tables for the Illinois dissolution forms.

Destination names follow the field names of the official fillable
templates. Tables are static and versioned alongside the templates; the
with-children petition is composed from the no-children one.
"""

from typing import List, Optional, Sequence

from ..models.enums import FieldKind
from ..models.mapping import FieldMappingEntry, FieldMappingTable, Transform
from .transforms import (
    COMMUNICATION,
    COUNTY,
    CURRENCY,
    DATE,
    DECISION,
    EMPLOYMENT,
    EXCHANGE_LOCATION,
    EXCHANGE_TIME,
    GROUNDS_LABEL,
    HOLIDAY,
    PARENT,
    RESPONSE_TIME,
    SCHEDULE,
    SUMMER,
    TRANSPORT,
    YES_NO,
)

TEXT = FieldKind.TEXT
CHECKBOX = FieldKind.CHECKBOX
NUMBER = FieldKind.NUMBER
DATE_FIELD = FieldKind.DATE


def _entry(
    source: str,
    destination: str,
    kind: FieldKind = TEXT,
    transform: Optional[Transform] = None,
    section: Optional[str] = None
) -> FieldMappingEntry:
    return FieldMappingEntry(
        source_key=source,
        destination_field=destination,
        field_kind=kind,
        transform=transform,
        section_tag=section
    )


def _money(section: str, pairs: Sequence[tuple]) -> List[FieldMappingEntry]:
    return [_entry(source, dest, NUMBER, CURRENCY, section) for source, dest in pairs]


# ============================================================================
# Petition for Dissolution of Marriage
# ============================================================================

PETITION_NO_CHILDREN = FieldMappingTable("petition-no-children", [
    _entry("petitioner-first-name", "PetitionerFirstName", section="personal-info"),
    _entry("petitioner-last-name", "PetitionerLastName", section="personal-info"),
    _entry("petitioner-middle-name", "PetitionerMiddleName", section="personal-info"),
    _entry("spouse-first-name", "RespondentFirstName", section="personal-info"),
    _entry("spouse-last-name", "RespondentLastName", section="personal-info"),
    _entry("marriage-date", "DateOfMarriage", DATE_FIELD, DATE, "personal-info"),
    _entry("separation-date", "DateOfSeparation", DATE_FIELD, DATE, "personal-info"),
    _entry("petitioner-county", "County", TEXT, COUNTY, "residency"),
    _entry("petitioner-address", "PetitionerAddress", section="residency"),
    _entry("spouse-address", "RespondentAddress", section="residency"),
    _entry("grounds-type", "GroundsForDivorce", TEXT, GROUNDS_LABEL, "grounds"),
])

PETITION_WITH_CHILDREN = PETITION_NO_CHILDREN.extend("petition-with-children", [
    _entry("has-children", "HasMinorChildren", CHECKBOX, YES_NO, "children"),
    _entry("number-of-children", "NumberOfChildren", NUMBER, section="children"),
])


# ============================================================================
# Financial Affidavit
# ============================================================================

FINANCIAL_AFFIDAVIT = FieldMappingTable("financial-affidavit", [
    _entry("full-name", "FullName", section="personal-info"),
    _entry("date-of-birth", "DateOfBirth", DATE_FIELD, DATE, "personal-info"),
    _entry("social-security-last-four", "SSNLast4", section="personal-info"),
    _entry("current-address", "CurrentAddress", section="personal-info"),
    _entry("employer-name", "EmployerName", section="personal-info"),
    _entry("occupation", "Occupation", section="personal-info"),
    _entry("employment-status", "EmploymentStatus", TEXT, EMPLOYMENT, "employment-income"),
    *_money("employment-income", [
        ("gross-monthly-salary", "GrossMonthlyIncome"),
        ("overtime-income", "OvertimeIncome"),
        ("bonus-income", "BonusIncome"),
    ]),
    *_money("other-income", [
        ("rental-income", "RentalIncome"),
        ("investment-income", "InvestmentIncome"),
        ("social-security-income", "SocialSecurityIncome"),
        ("pension-income", "PensionIncome"),
        ("disability-income", "DisabilityIncome"),
        ("unemployment-income", "UnemploymentIncome"),
        ("child-support-received", "ChildSupportReceived"),
        ("spousal-support-received", "SpousalSupportReceived"),
        ("other-income-amount", "OtherIncome"),
    ]),
    _entry("other-income-description", "OtherIncomeDescription", section="other-income"),
    *_money("housing-expenses", [
        ("monthly-rent-mortgage", "RentMortgage"),
        ("property-taxes", "PropertyTaxes"),
        ("homeowners-insurance", "HomeInsurance"),
        ("hoa-fees", "HOAFees"),
        ("home-maintenance", "HomeMaintenance"),
    ]),
    *_money("utility-expenses", [
        ("electricity", "Electricity"),
        ("gas-heating", "GasHeating"),
        ("water-sewer", "WaterSewer"),
        ("phone-cell", "PhoneCell"),
        ("internet-cable", "InternetCable"),
    ]),
    *_money("transportation-expenses", [
        ("car-payment", "CarPayment"),
        ("car-insurance", "CarInsurance"),
        ("gas-fuel", "GasFuel"),
        ("car-maintenance", "CarMaintenance"),
        ("parking-tolls", "ParkingTolls"),
        ("public-transportation", "PublicTransportation"),
    ]),
    *_money("food-personal-expenses", [
        ("groceries", "Groceries"),
        ("dining-out", "DiningOut"),
        ("clothing", "Clothing"),
        ("personal-care", "PersonalCare"),
    ]),
    *_money("healthcare-expenses", [
        ("health-insurance", "HealthInsurance"),
        ("dental-insurance", "DentalInsurance"),
        ("medical-out-of-pocket", "MedicalOutOfPocket"),
    ]),
    *_money("children-expenses", [
        ("childcare-daycare", "ChildcareDaycare"),
        ("child-tuition", "ChildTuition"),
        ("child-activities", "ChildActivities"),
        ("child-support-paid", "ChildSupportPaid"),
    ]),
    *_money("other-expenses", [
        ("life-insurance", "LifeInsurance"),
        ("entertainment", "Entertainment"),
    ]),
    *_money("real-estate-assets", [
        ("primary-residence-value", "PrimaryResidenceValue"),
        ("primary-residence-mortgage", "PrimaryResidenceMortgage"),
        ("other-property-value", "OtherPropertyValue"),
        ("other-property-mortgage", "OtherPropertyMortgage"),
    ]),
    _entry("vehicle-1-description", "Vehicle1Description", section="vehicle-assets"),
    *_money("vehicle-assets", [
        ("vehicle-1-value", "Vehicle1Value"),
        ("vehicle-1-loan", "Vehicle1Loan"),
    ]),
    _entry("vehicle-2-description", "Vehicle2Description", section="vehicle-assets"),
    *_money("vehicle-assets", [
        ("vehicle-2-value", "Vehicle2Value"),
        ("vehicle-2-loan", "Vehicle2Loan"),
    ]),
    *_money("financial-accounts", [
        ("checking-balance", "CheckingBalance"),
        ("savings-balance", "SavingsBalance"),
        ("investment-balance", "InvestmentBalance"),
        ("retirement-401k", "Retirement401k"),
        ("retirement-ira", "RetirementIRA"),
        ("pension-value", "PensionValue"),
        ("cash-on-hand", "CashOnHand"),
    ]),
    *_money("debts", [
        ("credit-card-debt", "CreditCardDebt"),
        ("student-loan-debt", "StudentLoanDebt"),
        ("personal-loan-debt", "PersonalLoanDebt"),
        ("medical-debt", "MedicalDebt"),
        ("tax-debt", "TaxDebt"),
        ("other-debt", "OtherDebt"),
    ]),
    _entry("other-debt-description", "OtherDebtDescription", section="debts"),
])


# ============================================================================
# Allocation Judgment: Parenting Plan
# ============================================================================

PARENTING_PLAN = FieldMappingTable("parenting-plan", [
    _entry("children-count", "NumberOfChildren", NUMBER, section="children-info"),
    _entry("education-authority", "EducationDecisionMaking", TEXT, DECISION, "decision-making"),
    _entry("healthcare-authority", "HealthcareDecisionMaking", TEXT, DECISION, "decision-making"),
    _entry("religious-authority", "ReligiousDecisionMaking", TEXT, DECISION, "decision-making"),
    _entry(
        "extracurricular-authority", "ExtracurricularDecisionMaking",
        TEXT, DECISION, "decision-making"
    ),
    _entry("schedule-type", "ScheduleType", TEXT, SCHEDULE, "regular-schedule"),
    _entry("primary-residence", "PrimaryResidence", TEXT, PARENT, "regular-schedule"),
    _entry("weekend-exchange-day", "WeekendStart", TEXT, EXCHANGE_TIME, "regular-schedule"),
    _entry("weekend-return-day", "WeekendEnd", TEXT, EXCHANGE_TIME, "regular-schedule"),
    _entry("midweek-visit", "MidweekVisit", CHECKBOX, YES_NO, "regular-schedule"),
    _entry("midweek-visit-day", "MidweekVisitDay", section="regular-schedule"),
    _entry("holiday-approach", "HolidayApproach", TEXT, HOLIDAY, "holidays"),
    _entry("thanksgiving-odd-years", "ThanksgivingOdd", TEXT, PARENT, "holidays"),
    _entry("christmas-eve-odd-years", "ChristmasEveOdd", TEXT, PARENT, "holidays"),
    _entry("christmas-day-odd-years", "ChristmasDayOdd", TEXT, PARENT, "holidays"),
    _entry("spring-break", "SpringBreak", section="holidays"),
    _entry("summer-approach", "SummerSchedule", TEXT, SUMMER, "summer-schedule"),
    _entry("summer-vacation-weeks", "VacationWeeks", NUMBER, section="summer-schedule"),
    _entry("vacation-notice-days", "VacationNotice", NUMBER, section="summer-schedule"),
    _entry("communication-method", "CommunicationMethod", TEXT, COMMUNICATION, "communication"),
    _entry("response-time", "ResponseTime", TEXT, RESPONSE_TIME, "communication"),
    _entry("child-phone-contact", "ChildPhoneContact", CHECKBOX, YES_NO, "communication"),
    _entry("exchange-location", "ExchangeLocation", TEXT, EXCHANGE_LOCATION, "transportation"),
    _entry(
        "transportation-responsibility", "TransportationResponsibility",
        TEXT, TRANSPORT, "transportation"
    ),
    _entry(
        "right-of-first-refusal", "RightOfFirstRefusal",
        CHECKBOX, YES_NO, "additional-provisions"
    ),
    _entry("refusal-hours", "RefusalHours", NUMBER, section="additional-provisions"),
    _entry("relocation-notice", "RelocationNotice", NUMBER, section="additional-provisions"),
    _entry("additional-notes", "AdditionalProvisions", section="additional-provisions"),
])


# ============================================================================
# Summons
# ============================================================================

SUMMONS = FieldMappingTable("summons", [
    _entry("petitioner-first-name", "PetitionerName"),
    _entry("petitioner-last-name", "PetitionerLastName"),
    _entry("spouse-first-name", "RespondentName"),
    _entry("spouse-last-name", "RespondentLastName"),
    _entry("spouse-address", "RespondentAddress"),
    _entry("petitioner-county", "County", TEXT, COUNTY),
])


BUILTIN_TABLES = (
    PETITION_NO_CHILDREN,
    PETITION_WITH_CHILDREN,
    FINANCIAL_AFFIDAVIT,
    PARENTING_PLAN,
    SUMMONS,
)
