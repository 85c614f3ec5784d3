"""Seed and load-test datasets.

`seed_records(now)` is the small demo dataset the store starts with when no
snapshot exists: four hubs, bank users, ops users, four advocates and one
assignment in each lifecycle status. `bulk_records(now)` is a larger set of
ten hubs, twenty-five advocates and sixty-five pending assignments for
exercising bulk allocation.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta

from ctmap.domain.entities.assignment import Assignment
from ctmap.domain.entities.document import AssignmentDocument
from ctmap.domain.entities.hub import Hub
from ctmap.domain.entities.query import Query
from ctmap.domain.entities.user import User
from ctmap.domain.value_objects.delivery import ReportVersion
from ctmap.domain.value_objects.enums import (
    AssignmentStatus,
    Priority,
    ProductType,
    Scope,
    UserRole,
)

Records = tuple[list[Assignment], list[User], list[Hub]]

HL, LAP, BL = ProductType.HL, ProductType.LAP, ProductType.BL
S = AssignmentStatus

HUBS = [
    ("h1", "HUB-MUM-01", "Mumbai Central Hub", "mum-hub@hdfc.mock", "Maharashtra", "Mumbai"),
    ("h2", "HUB-DEL-01", "Delhi NCR Hub", "del-hub@hdfc.mock", "Delhi", "New Delhi"),
    ("h3", "HUB-BLR-01", "Bangalore Tech Hub", "blr-hub@hdfc.mock", "Karnataka", "Bangalore"),
    ("h4", "HUB-PUN-01", "Pune City Hub", "pun-hub@hdfc.mock", "Maharashtra", "Pune"),
    ("h5", "HUB-HYD-01", "Hyderabad Hub", "hyd-hub@hdfc.mock", "Telangana", "Hyderabad"),
    ("h6", "HUB-CHE-01", "Chennai Hub", "che-hub@hdfc.mock", "Tamil Nadu", "Chennai"),
    ("h7", "HUB-KOL-01", "Kolkata Hub", "kol-hub@hdfc.mock", "West Bengal", "Kolkata"),
    ("h8", "HUB-AHM-01", "Ahmedabad Hub", "ahm-hub@hdfc.mock", "Gujarat", "Ahmedabad"),
    ("h9", "HUB-JAI-01", "Jaipur Hub", "jai-hub@hdfc.mock", "Rajasthan", "Jaipur"),
    ("h10", "HUB-LKO-01", "Lucknow Hub", "lko-hub@hdfc.mock", "Uttar Pradesh", "Lucknow"),
]

OPS_USERS = [
    ("ops1", "CT Operations Team", "ops@ctmap.mock"),
    ("ops2", "Admin User", "admin@ctmap.mock"),
]

# id, name, hub
BANK_USERS = [
    ("u1", "Amit Sharma", "h1"),
    ("u2", "Priya Menon", "h2"),
    ("u3", "Rahul Krishna", "h3"),
    ("u4", "Sneha Kulkarni", "h4"),
    ("u5", "Kiran Reddy", "h5"),
    ("u6", "Divya Nair", "h6"),
    ("u7", "Arjun Bose", "h7"),
    ("u8", "Neha Desai", "h8"),
    ("u9", "Rajiv Chauhan", "h9"),
    ("u10", "Anita Verma", "h10"),
]

# id, name, hub, firm, states, districts, expertise, tags
ADVOCATES = [
    ("adv1", "Rohan Deshmukh", "h1", "Deshmukh Associates", ["Maharashtra"],
     ["Mumbai", "Thane", "Navi Mumbai"], [HL, LAP], ["High Value Expert", "Fast TAT", "10+ Years"]),
    ("adv2", "Priya Kulkarni", "h4", "Kulkarni Law Firm", ["Maharashtra"],
     ["Pune", "Satara", "Kolhapur"], [HL, BL], ["Commercial Specialist", "Title Expert"]),
    ("adv3", "Vikram Joshi", "h1", "Joshi & Partners", ["Maharashtra"],
     ["Mumbai", "Raigad"], [LAP, BL], ["Property Law", "Fast Processing"]),
    ("adv4", "Neha Patil", "h4", "Patil Associates", ["Maharashtra"],
     ["Pune", "Nashik"], [HL], ["Residential Expert", "Customer Focused"]),
    ("adv5", "Amit Malhotra", "h1", "Malhotra Legal", ["Maharashtra", "Goa"],
     ["Mumbai", "Thane", "Panaji"], [HL, LAP, BL], ["Multi-Product", "Senior Partner"]),
    ("adv6", "Suresh Kumar", "h2", "Suresh Law Firm", ["Delhi", "Haryana"],
     ["New Delhi", "Gurgaon", "Noida"], [BL, LAP], ["Commercial Specialist", "NCR Expert"]),
    ("adv7", "Kavita Sharma", "h2", "Sharma Associates", ["Delhi"],
     ["New Delhi", "South Delhi", "East Delhi"], [HL, LAP], ["Delhi Specialist", "Quick Response"]),
    ("adv8", "Rajesh Verma", "h2", "Verma Legal Services", ["Delhi", "Uttar Pradesh"],
     ["New Delhi", "Noida", "Ghaziabad"], [HL, BL], ["Cross-State", "Experienced"]),
    ("adv9", "Deepak Mehta", "h2", "Mehta & Co", ["Haryana", "Punjab"],
     ["Gurgaon", "Faridabad", "Chandigarh"], [LAP, BL], ["Business Loans", "Corporate"]),
    ("adv10", "Anjali Rao", "h3", "Anjali & Partners", ["Karnataka"],
     ["Bangalore", "Mysore", "Mangalore"], [HL, LAP], ["Residential Specialist", "Tech City Expert"]),
    ("adv11", "Karthik Gowda", "h3", "Gowda Law Associates", ["Karnataka"],
     ["Bangalore", "Hubli"], [HL, BL], ["IT Park Expert", "Commercial"]),
    ("adv12", "Srinivas Reddy", "h3", "Reddy Legal Services", ["Karnataka", "Andhra Pradesh"],
     ["Bangalore", "Belgaum", "Vijayawada"], [LAP, BL], ["Multi-State", "Property Expert"]),
    ("adv13", "Ramesh Iyer", "h6", "Iyer & Associates", ["Tamil Nadu"],
     ["Chennai", "Coimbatore", "Madurai"], [HL, LAP], ["Tamil Nadu Expert", "Fast TAT"]),
    ("adv14", "Lakshmi Sundaram", "h6", "Sundaram Law Firm", ["Tamil Nadu"],
     ["Chennai", "Trichy"], [HL, BL], ["Residential", "Detail Oriented"]),
    ("adv15", "Venkat Krishnan", "h6", "Krishnan Legal", ["Tamil Nadu", "Kerala"],
     ["Chennai", "Kochi", "Trivandrum"], [LAP, BL], ["South India Expert", "Commercial"]),
    ("adv16", "Harish Chowdary", "h5", "Chowdary Associates", ["Telangana"],
     ["Hyderabad", "Warangal"], [HL, LAP], ["Hyderabad Expert", "IT Sector"]),
    ("adv17", "Madhavi Reddy", "h5", "Madhavi Law Firm", ["Telangana", "Andhra Pradesh"],
     ["Hyderabad", "Secunderabad", "Vijayawada"], [HL, BL], ["Dual State", "Commercial"]),
    ("adv18", "Subrata Das", "h7", "Das & Co", ["West Bengal"],
     ["Kolkata", "Howrah", "Durgapur"], [HL, LAP], ["Kolkata Expert", "Quick Processing"]),
    ("adv19", "Ananya Chatterjee", "h7", "Chatterjee Legal", ["West Bengal"],
     ["Kolkata", "Siliguri"], [HL, BL], ["Heritage Properties", "Detail Expert"]),
    ("adv20", "Jayesh Patel", "h8", "Patel & Associates", ["Gujarat"],
     ["Ahmedabad", "Surat", "Vadodara"], [HL, BL], ["Gujarat Expert", "Commercial"]),
    ("adv21", "Nisha Shah", "h8", "Shah Law Firm", ["Gujarat"],
     ["Ahmedabad", "Gandhinagar"], [LAP, BL], ["Business Focus", "Fast Response"]),
    ("adv22", "Arjun Singh", "h9", "Singh Associates", ["Rajasthan"],
     ["Jaipur", "Udaipur", "Jodhpur"], [HL, LAP], ["Rajasthan Expert", "Property Law"]),
    ("adv23", "Meera Rathore", "h9", "Rathore Legal", ["Rajasthan"],
     ["Jaipur", "Kota"], [HL, BL], ["Residential", "Commercial"]),
    ("adv24", "Sandeep Yadav", "h10", "Yadav Law Services", ["Uttar Pradesh"],
     ["Lucknow", "Kanpur", "Agra"], [HL, LAP], ["UP Expert", "Multi-City"]),
    ("adv25", "Pooja Mishra", "h10", "Mishra & Partners", ["Uttar Pradesh"],
     ["Lucknow", "Varanasi"], [HL, BL], ["Heritage Expert", "Detailed Review"]),
]

# Seed set: first four hubs / bank users and four advocates
SEED_ADVOCATES = ("adv1", "adv2", "adv6", "adv10")


def _hubs(limit: int | None = None) -> list[Hub]:
    return [
        Hub(id=h[0], code=h[1], name=h[2], email=h[3], state=h[4], district=h[5])
        for h in HUBS[:limit]
    ]


def _users(bank_limit: int | None, advocate_ids: tuple[str, ...] | None) -> list[User]:
    users = [
        User(
            id=uid,
            name=name,
            email=name.lower().replace(" ", ".") + "@bank.mock",
            role=UserRole.BANK_USER,
            hub_id=hub_id,
        )
        for uid, name, hub_id in BANK_USERS[:bank_limit]
    ]
    users += [User(id=uid, name=name, email=email, role=UserRole.CT_OPS) for uid, name, email in OPS_USERS]
    for aid, name, hub_id, firm, states, districts, expertise, tags in ADVOCATES:
        if advocate_ids is not None and aid not in advocate_ids:
            continue
        users.append(User(
            id=aid,
            name=name,
            email=f"{name.split()[0].lower()}@legal.mock",
            role=UserRole.ADVOCATE,
            hub_id=hub_id,
            firm_name=firm,
            states=list(states),
            districts=list(districts),
            expertise=list(expertise),
            tags=list(tags),
        ))
    return users


def _doc(doc_id: str, name: str, category: str, by: str, at: datetime) -> AssignmentDocument:
    return AssignmentDocument(id=doc_id, name=name, category=category, uploaded_by=by, date=at)


def seed_records(now: datetime) -> Records:
    """Demo dataset: one assignment in each interesting status."""
    day = timedelta(days=1)

    def asn(aid, lan, pan, borrower, address, state, district, pincode, product, scope,
            priority=Priority.STANDARD, status=S.UNCLAIMED, age_days=1, **extra):
        return Assignment(
            id=aid, lan=lan, pan=pan, borrower_name=borrower, property_address=address,
            state=state, district=district, pincode=pincode,
            borrower_state=extra.pop("borrower_state", state),
            borrower_district=extra.pop("borrower_district", district),
            product_type=product, scope=scope, priority=priority, status=status,
            created_at=now - age_days * day, **extra,
        )

    assignments = [
        # Unclaimed pool
        asn("asn_001", "LN10001", "ABCDE1234F", "Rajesh Kumar", "Flat 401, Lotus Park, Andheri West",
            "Maharashtra", "Mumbai", "400053", HL, Scope.TSR, Priority.HIGH_VALUE, age_days=2),
        # same PAN, different property
        asn("asn_010", "LN10001-B", "ABCDE1234F", "Rajesh Kumar", "Office 202, Business Bay, Bandra",
            "Maharashtra", "Mumbai", "400050", BL, Scope.LOR),
        asn("asn_002", "LN10002", "FGHIJ5678K", "Sneha Gupta", "Villa 22, Green Valley",
            "Delhi", "New Delhi", "110001", LAP, Scope.LOR, Priority.URGENT,
            borrower_state="Haryana", borrower_district="Gurgaon"),
        asn("asn_004", "LN10003", "KJIHG4321L", "Vikram Singh", "Plot 45, Indiranagar",
            "Karnataka", "Bangalore", "560038", BL, Scope.TSR, age_days=3),
        # Draft
        asn("asn_005", "LN20001", "ZZZ999", "Arjun Rampal", "Penthouse 9, Sky Towers",
            "Maharashtra", "Mumbai", "400001", HL, Scope.TSR, Priority.HIGH_VALUE, S.DRAFT,
            age_days=0, owner_id="u1", hub_id="h1", claimed_at=now),
        # Pending allocation, borrower lives in Pune
        asn("asn_003", "LN20005", "AAA111", "Demo User", "123 Demo Street",
            "Maharashtra", "Mumbai", "400001", HL, Scope.TSR, status=S.PENDING_ALLOCATION,
            age_days=0, owner_id="u1", hub_id="h1", claimed_at=now,
            borrower_district="Pune",
            documents=[_doc("doc_seed_1", "SaleDeed.pdf", "Sale Deed", "u1", now)]),
        asn("asn_006", "LN30001", "BBB222", "Meera Nair", "Bungalow 5, Koregaon Park",
            "Maharashtra", "Pune", "411001", HL, Scope.TSR, status=S.ALLOCATED, age_days=5,
            owner_id="u4", hub_id="h4", advocate_id="adv1", advocate_history=["adv1"],
            claimed_at=now - 4 * day, allocated_at=now, due_date=now + 3 * day,
            documents=[_doc("doc_seed_2", "AllDocs.zip", "Multiple", "u4", now)]),
        asn("asn_007", "LN40001", "CCC333", "Rajeev Bhatia", "Shop 12, Karol Bagh",
            "Delhi", "New Delhi", "110005", LAP, Scope.LOR, Priority.URGENT, S.QUERY_RAISED,
            age_days=7, owner_id="u2", hub_id="h2", advocate_id="adv6", advocate_history=["adv6"],
            claimed_at=now - 6 * day, allocated_at=now - 2 * day, due_date=now + 5 * day,
            documents=[_doc("doc_seed_3", "PropertyTax.pdf", "Tax Receipt", "u2", now)],
            queries=[Query(
                id="q1",
                text="Previous owner chain link document missing for year 2010-2015.",
                raised_by="adv6",
                raised_at=now,
            )]),
        asn("asn_008", "LN50001", "DDD444", "Sunil Gavaskar", "Flat 10, Dadar West",
            "Maharashtra", "Mumbai", "400028", HL, Scope.TSR, status=S.PENDING_APPROVAL,
            age_days=11, owner_id="u1", hub_id="h1", advocate_id="adv1", advocate_history=["adv1"],
            claimed_at=now - 10 * day, allocated_at=now - 8 * day, due_date=now - day,
            documents=[_doc("doc_seed_4", "Chain.pdf", "Sale Deed", "u1", now)],
            final_report_url="report.pdf",
            report_versions=[ReportVersion(url="report.pdf", date=now, remarks="Clean title found.")]),
        asn("asn_009", "LN60001", "EEE555", "Virat Kohli", "Farmhouse, Chhatarpur",
            "Delhi", "New Delhi", "110074", HL, Scope.TSR, Priority.HIGH_VALUE, S.COMPLETED,
            age_days=21, owner_id="u2", hub_id="h2", advocate_id="adv6", advocate_history=["adv6"],
            claimed_at=now - 20 * day, allocated_at=now - 15 * day, completed_at=now - day,
            documents=[_doc("doc_seed_5", "AllDocs.pdf", "Multiple", "u2", now)],
            final_report_url="final_report.pdf",
            report_versions=[ReportVersion(url="final_report.pdf", date=now, remarks="Approved.")]),
        # Owned by u2 so u1 can request a transfer
        asn("asn_099", "LN_TRANSFER_TEST", "TEST12345T", "Transfer User", "Test Location for Transfer",
            "Delhi", "New Delhi", "110001", HL, Scope.TSR, status=S.DRAFT, age_days=0,
            owner_id="u2", hub_id="h2", claimed_at=now),
    ]
    return assignments, _users(4, SEED_ADVOCATES), _hubs(4)


LOCATIONS = [
    ("Maharashtra", ["Mumbai", "Pune", "Nagpur", "Thane", "Nashik"]),
    ("Delhi", ["New Delhi", "South Delhi", "East Delhi"]),
    ("Karnataka", ["Bangalore", "Mysore", "Mangalore", "Hubli"]),
    ("Tamil Nadu", ["Chennai", "Coimbatore", "Madurai", "Trichy"]),
    ("Telangana", ["Hyderabad", "Warangal", "Nizamabad"]),
    ("West Bengal", ["Kolkata", "Howrah", "Durgapur"]),
    ("Gujarat", ["Ahmedabad", "Surat", "Vadodara"]),
    ("Rajasthan", ["Jaipur", "Udaipur", "Jodhpur"]),
    ("Uttar Pradesh", ["Lucknow", "Kanpur", "Agra", "Varanasi"]),
    ("Haryana", ["Gurgaon", "Faridabad", "Ghaziabad"]),
]

BORROWERS = [
    "Rajesh Kumar", "Priya Sharma", "Anil Patel", "Sneha Reddy", "Vikram Singh",
    "Deepa Iyer", "Rahul Verma", "Kavita Menon", "Suresh Rao", "Anita Desai",
    "Mohit Gupta", "Pooja Joshi", "Sanjay Nair", "Ritu Malhotra", "Ajay Kulkarni",
    "Meera Sundaram", "Nitin Chauhan", "Swati Das", "Vivek Mishra", "Nisha Bose",
    "Karan Mehta", "Divya Pillai", "Rohit Agarwal", "Sonia Kapoor", "Amit Banerjee",
]

PROPERTIES = [
    "Flat 401, Lotus Park", "Villa 12, Green Valley", "Plot 203, Tech City",
    "Apartment 5B, Lake View", "Bungalow, Palm Grove", "Flat 801, Sky Tower",
    "Villa 45, Riverside", "Plot 156, Industrial Area", "Apartment 3C, Hill View",
    "Shop 23, Commercial Complex",
]

PRIORITIES = [Priority.HIGH_VALUE, Priority.STANDARD, Priority.URGENT]
PRODUCTS = [HL, LAP, BL]


def bulk_records(now: datetime, count: int = 65, seed: int = 7) -> Records:
    """Load-test dataset: *count* pending assignments spread across ten states."""
    rng = random.Random(seed)
    assignments = []
    for i in range(count):
        state, districts = LOCATIONS[i % len(LOCATIONS)]
        district = rng.choice(districts)
        owner_id, _, hub_id = BANK_USERS[i % len(BANK_USERS)]
        assignments.append(Assignment(
            id=f"asn_{i + 1:03d}",
            lan=f"LN{10000 + i}",
            pan=f"ABC{i:02d}{1234 + i}F",
            borrower_name=BORROWERS[i % len(BORROWERS)],
            property_address=f"{PROPERTIES[i % len(PROPERTIES)]}, {district}",
            state=state,
            district=district,
            pincode=str(400000 + i * 100),
            borrower_state=state,
            borrower_district=district,
            product_type=PRODUCTS[i % len(PRODUCTS)],
            scope=Scope.TSR,
            priority=PRIORITIES[i % len(PRIORITIES)],
            status=S.PENDING_ALLOCATION,
            owner_id=owner_id,
            hub_id=hub_id,
            claimed_at=now,
            created_at=now - timedelta(days=rng.uniform(0, 10)),
        ))
    return assignments, _users(None, None), _hubs()
